from aiogram.fsm.state import State, StatesGroup

class AddTenantState(StatesGroup):
    waiting_for_first_name = State()
    waiting_for_last_name = State()
    waiting_for_phone = State()
    waiting_for_id_number = State()

class EditTenantState(StatesGroup):
    waiting_for_value = State()

class MoveInState(StatesGroup):
    waiting_for_room = State()
    waiting_for_tenant = State()
    waiting_for_rent = State()
    waiting_for_deposit = State()
    waiting_for_start_date = State()
    waiting_for_occupants = State()
    confirm = State()

class EditRoomState(StatesGroup):
    waiting_for_rate = State()
    waiting_for_notes = State()

class ManualPaymentState(StatesGroup):
    waiting_for_contract = State()
    waiting_for_amount = State()
    waiting_for_type = State()
    waiting_for_method = State()
    waiting_for_status = State()

class UtilityReadingState(StatesGroup):
    waiting_for_readings = State()

class EditSettingState(StatesGroup):
    waiting_for_value = State()
