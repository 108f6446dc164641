"""
Translations for the admin UI.

Services return symbolic error codes with named params; this module is the
only place they become text.
"""
import re
from typing import Optional

from motelbot.services.results import BusinessError


TRANSLATIONS = {
    "en": {
        # Errors
        "MAX_OCCUPANTS": "Maximum {max} people per room (1 tenant + {rest} occupants)",
        "DUPLICATE_OCCUPANT_IDS": "Duplicate ID numbers within the submitted occupants ({id_number})",
        "DUPLICATE_ID": "ID number \"{id_number}\" is already used by {holder}",
        "TENANT_HAS_ACTIVE_CONTRACTS": "Cannot delete tenant with active contracts",
        "ROOM_NOT_VACANT": "Room {room} is not vacant",
        "TENANT_HAS_ACTIVE_CONTRACT": "{tenant} already has an active contract",
        "ROOM_STATUS_LOCKED": "Room {room} is {status}; occupancy only changes through move-in / move-out",
        "error.generic": "Something went wrong. Please try again later.",
        "error.invalid": "Invalid value: {detail}",
        "error.not_admin": "This bot is for the motel administrator only.",

        # Menu
        "menu.title": "Motel Manager",
        "menu.rooms": "🏠 Rooms",
        "menu.tenants": "👥 Tenants",
        "menu.contracts": "📝 Contracts",
        "menu.payments": "💳 Payments",
        "menu.utilities": "⚡ Utilities",
        "menu.reports": "📊 Reports",
        "menu.settings": "⚙️ Settings",
        "menu.help": "❔ Help",
        "common.back": "◀️ Back",
        "common.cancel": "❌ Cancel",
        "common.confirm": "✅ Confirm",
        "common.cancelled": "Cancelled.",
        "common.saved": "Saved.",
        "common.skip": "Send - to skip",
        "common.language_set": "Language: English",
        "common.use_cancel": "Send a value, or /cancel to stop.",

        # Statuses
        "room.vacant": "Vacant",
        "room.occupied": "Occupied",
        "room.maintenance": "Maintenance",
        "contract.active": "Active",
        "contract.ended": "Ended",
        "payment.pending": "Pending",
        "payment.paid": "Paid",
        "type.rent": "Rent",
        "type.deposit": "Deposit",
        "type.utility": "Utility",
        "type.other": "Other",
        "method.cash": "Cash",
        "method.transfer": "Transfer",
        "method.card": "Card",

        # Rooms
        "rooms.title": "Rooms",
        "rooms.empty": "No rooms yet. Use /seed_rooms to create them.",
        "rooms.seeded": "{count} rooms created.",
        "rooms.edit_rate": "Enter the new monthly rate for room {room}:",
        "rooms.edit_notes": "Enter notes for room {room} (- to clear):",
        "rooms.people": "People",
        "rooms.rate": "Rate",
        "rooms.status": "Status",
        "rooms.floor": "Floor",
        "rooms.notes": "Notes",

        # Tenants
        "tenants.title": "Tenants",
        "tenants.empty": "No tenants found.",
        "tenants.add": "➕ Add tenant",
        "tenants.search_hint": "Search: /tenants name, phone or ID",
        "tenants.ask_first_name": "First name:",
        "tenants.ask_last_name": "Last name:",
        "tenants.ask_phone": "Phone:",
        "tenants.ask_id_number": "ID number (CCCD / passport):",
        "tenants.created": "Tenant {name} created.",
        "tenants.delete_confirm": "Delete {name} and all past contracts and payments?",
        "tenants.deleted": "Tenant deleted.",

        # Contracts
        "contracts.title": "Contracts",
        "contracts.active": "Active contracts ({count})",
        "contracts.past": "Past contracts ({count})",
        "contracts.none_active": "No active contracts.",
        "contracts.move_in": "🔑 Move in",
        "contracts.move_out": "🚪 Move out",
        "contracts.no_vacant": "No vacant rooms available. A tenant must move out before a new move-in.",
        "contracts.no_tenants": "All tenants have active contracts. Add a new tenant first.",
        "contracts.pick_room": "Select a room:",
        "contracts.pick_tenant": "Select a tenant:",
        "contracts.ask_rent": "Monthly rent (room rate {rate}):",
        "contracts.ask_deposit": "Deposit:",
        "contracts.ask_start": "Start date (DD/MM/YYYY or YYYY-MM-DD, - for today):",
        "contracts.ask_occupants": "Other occupants, one per line:\n<code>First Last; phone; ID number; relationship</code>\nUp to {rest} people. Send - for none.",
        "contracts.summary": "Room {room} · {tenant} · {people} people",
        "contracts.created": "Contract {id} created. Room {room} is now occupied.",
        "contracts.move_out_confirm": "Move out {tenant} from room {room}?",
        "contracts.moved_out": "Moved out. Room {room} is now vacant.",

        # Payments
        "payments.title": "Payments {month}",
        "payments.expected": "Expected",
        "payments.collected": "Collected",
        "payments.pending": "Pending",
        "payments.generate": "🧾 Generate rent",
        "payments.generated": "{count} rent payments created for {month}.",
        "payments.add": "➕ Add payment",
        "payments.no_rent": "not generated",
        "payments.ask_contract": "Select a contract:",
        "payments.ask_amount": "Amount:",
        "payments.ask_type": "Payment type:",
        "payments.ask_method": "Method:",
        "payments.ask_status": "Status:",
        "payments.added": "Payment added.",
        "payments.deleted": "Payment deleted.",

        # Utilities
        "utilities.title": "Utilities {month}",
        "utilities.generate": "⚡ Generate all",
        "utilities.generated": "{count} rooms prepared for {month}.",
        "utilities.electric": "Electric",
        "utilities.water": "Water",
        "utilities.total": "Total",
        "utilities.ask_readings": "Room {room}: send end readings as <code>electric water</code> (start {electric_start} / {water_start}):",
        "utilities.saved": "Room {room}: {total}",

        # Reports
        "reports.dashboard": "Dashboard",
        "reports.title": "Report {month}",
        "reports.income": "Income",
        "reports.unpaid": "Unpaid",
        "reports.occupancy": "Occupancy",
        "reports.history": "Occupancy history",
        "reports.utility_cost": "Utility cost",
        "reports.active_contracts": "Active contracts",
        "reports.tenants": "Tenants",

        # Settings
        "settings.title": "Settings",
        "settings.motel_name": "Motel name",
        "settings.motel_address": "Address",
        "settings.motel_phone": "Phone",
        "settings.default_room_rate": "Default room rate",
        "settings.electric_rate": "Electric rate",
        "settings.water_rate": "Water rate",
        "settings.currency": "Currency",
        "settings.ask_value": "New value for {name}:",
        "settings.rates_applied": "Default rate applied to all rooms.",

        # Help
        "help.text": (
            "/rooms - room list\n"
            "/tenants [search] - tenants\n"
            "/contracts - move in / move out\n"
            "/payments [YYYY-MM] - rent and payments\n"
            "/utilities [YYYY-MM] - meter readings\n"
            "/dashboard - overview\n"
            "/report [YYYY-MM] - monthly report\n"
            "/settings - motel settings\n"
            "/lang - switch language\n"
            "/cancel - cancel current input"
        ),
    },
    "vi": {
        "MAX_OCCUPANTS": "Tối đa {max} người mỗi phòng (1 người thuê + {rest} người ở cùng)",
        "DUPLICATE_OCCUPANT_IDS": "Số giấy tờ bị trùng giữa những người ở cùng ({id_number})",
        "DUPLICATE_ID": "Số giấy tờ \"{id_number}\" đã được sử dụng bởi {holder}",
        "TENANT_HAS_ACTIVE_CONTRACTS": "Không thể xóa người thuê đang có hợp đồng",
        "ROOM_NOT_VACANT": "Phòng {room} không còn trống",
        "TENANT_HAS_ACTIVE_CONTRACT": "{tenant} đã có hợp đồng đang hiệu lực",
        "ROOM_STATUS_LOCKED": "Phòng {room} đang ở trạng thái {status}; chỉ thay đổi khi nhận hoặc trả phòng",
        "error.generic": "Đã xảy ra lỗi. Vui lòng thử lại sau.",
        "error.invalid": "Giá trị không hợp lệ: {detail}",
        "error.not_admin": "Bot này chỉ dành cho quản lý nhà trọ.",

        "menu.title": "Quản lý nhà trọ",
        "menu.rooms": "🏠 Phòng",
        "menu.tenants": "👥 Người thuê",
        "menu.contracts": "📝 Hợp đồng",
        "menu.payments": "💳 Thanh toán",
        "menu.utilities": "⚡ Điện nước",
        "menu.reports": "📊 Báo cáo",
        "menu.settings": "⚙️ Cài đặt",
        "menu.help": "❔ Trợ giúp",
        "common.back": "◀️ Quay lại",
        "common.cancel": "❌ Hủy",
        "common.confirm": "✅ Xác nhận",
        "common.cancelled": "Đã hủy.",
        "common.saved": "Đã lưu.",
        "common.skip": "Gửi - để bỏ qua",
        "common.language_set": "Ngôn ngữ: Tiếng Việt",
        "common.use_cancel": "Hãy nhập giá trị, hoặc /cancel để dừng.",

        "room.vacant": "Trống",
        "room.occupied": "Đang thuê",
        "room.maintenance": "Bảo trì",
        "contract.active": "Hiệu lực",
        "contract.ended": "Đã kết thúc",
        "payment.pending": "Chưa thanh toán",
        "payment.paid": "Đã thanh toán",
        "type.rent": "Tiền phòng",
        "type.deposit": "Tiền cọc",
        "type.utility": "Điện nước",
        "type.other": "Khác",
        "method.cash": "Tiền mặt",
        "method.transfer": "Chuyển khoản",
        "method.card": "Thẻ",

        "rooms.title": "Danh sách phòng",
        "rooms.empty": "Chưa có phòng. Dùng /seed_rooms để tạo.",
        "rooms.seeded": "Đã tạo {count} phòng.",
        "rooms.edit_rate": "Nhập giá thuê mới cho phòng {room}:",
        "rooms.edit_notes": "Nhập ghi chú cho phòng {room} (- để xóa):",
        "rooms.people": "Số người",
        "rooms.rate": "Giá",
        "rooms.status": "Trạng thái",
        "rooms.floor": "Tầng",
        "rooms.notes": "Ghi chú",

        "tenants.title": "Người thuê",
        "tenants.empty": "Không tìm thấy người thuê.",
        "tenants.add": "➕ Thêm người thuê",
        "tenants.search_hint": "Tìm kiếm: /tenants tên, SĐT hoặc số giấy tờ",
        "tenants.ask_first_name": "Họ:",
        "tenants.ask_last_name": "Tên:",
        "tenants.ask_phone": "Số điện thoại:",
        "tenants.ask_id_number": "Số CCCD / hộ chiếu:",
        "tenants.created": "Đã thêm người thuê {name}.",
        "tenants.delete_confirm": "Xóa {name} cùng các hợp đồng và thanh toán cũ?",
        "tenants.deleted": "Đã xóa người thuê.",

        "contracts.title": "Hợp đồng",
        "contracts.active": "Hợp đồng hiệu lực ({count})",
        "contracts.past": "Hợp đồng cũ ({count})",
        "contracts.none_active": "Không có hợp đồng nào.",
        "contracts.move_in": "🔑 Nhận phòng",
        "contracts.move_out": "🚪 Trả phòng",
        "contracts.no_vacant": "Không còn phòng trống. Cần trả phòng trước khi nhận phòng mới.",
        "contracts.no_tenants": "Tất cả người thuê đều đã có hợp đồng. Hãy thêm người thuê mới.",
        "contracts.pick_room": "Chọn phòng:",
        "contracts.pick_tenant": "Chọn người thuê:",
        "contracts.ask_rent": "Tiền thuê hàng tháng (giá phòng {rate}):",
        "contracts.ask_deposit": "Tiền cọc:",
        "contracts.ask_start": "Ngày bắt đầu (DD/MM/YYYY hoặc YYYY-MM-DD, - là hôm nay):",
        "contracts.ask_occupants": "Người ở cùng, mỗi người một dòng:\n<code>Họ Tên; SĐT; số giấy tờ; quan hệ</code>\nTối đa {rest} người. Gửi - nếu không có.",
        "contracts.summary": "Phòng {room} · {tenant} · {people} người",
        "contracts.created": "Đã tạo hợp đồng {id}. Phòng {room} đang được thuê.",
        "contracts.move_out_confirm": "Trả phòng {room} của {tenant}?",
        "contracts.moved_out": "Đã trả phòng. Phòng {room} đang trống.",

        "payments.title": "Thanh toán {month}",
        "payments.expected": "Dự kiến",
        "payments.collected": "Đã thu",
        "payments.pending": "Còn nợ",
        "payments.generate": "🧾 Tạo tiền phòng",
        "payments.generated": "Đã tạo {count} khoản tiền phòng cho {month}.",
        "payments.add": "➕ Thêm thanh toán",
        "payments.no_rent": "chưa tạo",
        "payments.ask_contract": "Chọn hợp đồng:",
        "payments.ask_amount": "Số tiền:",
        "payments.ask_type": "Loại thanh toán:",
        "payments.ask_method": "Hình thức:",
        "payments.ask_status": "Trạng thái:",
        "payments.added": "Đã thêm thanh toán.",
        "payments.deleted": "Đã xóa thanh toán.",

        "utilities.title": "Điện nước {month}",
        "utilities.generate": "⚡ Tạo tất cả",
        "utilities.generated": "Đã chuẩn bị {count} phòng cho {month}.",
        "utilities.electric": "Điện",
        "utilities.water": "Nước",
        "utilities.total": "Tổng",
        "utilities.ask_readings": "Phòng {room}: gửi chỉ số cuối <code>điện nước</code> (đầu kỳ {electric_start} / {water_start}):",
        "utilities.saved": "Phòng {room}: {total}",

        "reports.dashboard": "Tổng quan",
        "reports.title": "Báo cáo {month}",
        "reports.income": "Thu nhập",
        "reports.unpaid": "Chưa thanh toán",
        "reports.occupancy": "Tỷ lệ lấp đầy",
        "reports.history": "Lịch sử lấp đầy",
        "reports.utility_cost": "Chi phí điện nước",
        "reports.active_contracts": "Hợp đồng hiệu lực",
        "reports.tenants": "Người thuê",

        "settings.title": "Cài đặt",
        "settings.motel_name": "Tên nhà trọ",
        "settings.motel_address": "Địa chỉ",
        "settings.motel_phone": "Số điện thoại",
        "settings.default_room_rate": "Giá phòng mặc định",
        "settings.electric_rate": "Giá điện",
        "settings.water_rate": "Giá nước",
        "settings.currency": "Tiền tệ",
        "settings.ask_value": "Giá trị mới cho {name}:",
        "settings.rates_applied": "Đã áp dụng giá mặc định cho tất cả các phòng.",

        "help.text": (
            "/rooms - danh sách phòng\n"
            "/tenants [từ khóa] - người thuê\n"
            "/contracts - nhận phòng / trả phòng\n"
            "/payments [YYYY-MM] - tiền phòng và thanh toán\n"
            "/utilities [YYYY-MM] - chỉ số điện nước\n"
            "/dashboard - tổng quan\n"
            "/report [YYYY-MM] - báo cáo tháng\n"
            "/settings - cài đặt nhà trọ\n"
            "/lang - đổi ngôn ngữ\n"
            "/cancel - hủy thao tác hiện tại"
        ),
    },
}

LANGUAGES = tuple(TRANSLATIONS)

_PARAM = re.compile(r"\{(\w+)\}")


def t(key: str, lang: Optional[str] = None, **params) -> str:
    """
    Translate key. Falls back to English, then to the key itself.
    Unknown {params} are left in place.
    """
    table = TRANSLATIONS.get(lang or "en", TRANSLATIONS["en"])
    text = table.get(key) or TRANSLATIONS["en"].get(key) or key
    if not params:
        return text
    return _PARAM.sub(lambda m: str(params[m.group(1)]) if m.group(1) in params else m.group(0), text)


def render_error(error: BusinessError, lang: Optional[str] = None) -> str:
    return t(error.code, lang, **error.params)
