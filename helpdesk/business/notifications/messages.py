"""
WhatsApp message templates (Indonesian, WhatsApp markdown)
"""

from typing import Iterable, Optional


def borrowing_approved(borrower_name: str, asset_name: str) -> str:
    return (
        f"✅ *Peminjaman Disetujui!*\n\n"
        f"Halo {borrower_name},\n\n"
        f"Peminjaman asset \"{asset_name}\" telah disetujui.\n"
        f"Silakan ambil asset di lokasi asal.\n\n"
        f"Terima kasih! 🙏"
    )


def borrowing_rejected(borrower_name: str, asset_name: str, reason: Optional[str] = None) -> str:
    reason_line = f"\nAlasan: {reason}" if reason else ""
    return (
        f"❌ *Peminjaman Ditolak*\n\n"
        f"Halo {borrower_name},\n\n"
        f"Maaf, peminjaman asset \"{asset_name}\" ditolak.{reason_line}\n\n"
        f"Silakan hubungi admin untuk info lebih lanjut."
    )


def borrowing_requested(borrower_name: str, asset_name: str, purpose: str) -> str:
    return (
        f"📦 *REQUEST PEMINJAMAN BARU*\n\n"
        f"👤 *Peminjam:* {borrower_name}\n"
        f"📦 *Asset:* {asset_name}\n"
        f"📝 *Tujuan:* {purpose}\n\n"
        f"Silakan login ke IT Helpdesk untuk approve/reject."
    )


def atk_request_approved(requester_name: str) -> str:
    return (
        f"🎉 *Request ATK Disetujui!*\n\n"
        f"Halo {requester_name},\n\n"
        f"Request ATK Anda telah disetujui.\n"
        f"Silakan ambil di Gudang IT.\n\n"
        f"Terima kasih! 🙏"
    )


def atk_request_rejected(requester_name: str, reason: Optional[str] = None) -> str:
    reason_line = f"\nAlasan: {reason}" if reason else ""
    return (
        f"❌ *Request ATK Ditolak*\n\n"
        f"Halo {requester_name},\n\n"
        f"Maaf, request ATK Anda ditolak.{reason_line}\n\n"
        f"Silakan hubungi admin untuk info lebih lanjut."
    )


def ticket_assigned(title: str, category: str, priority: str, reporter_name: str) -> str:
    return (
        f"🎫 *TICKET BARU UNTUK ANDA*\n\n"
        f"📋 *Judul:* {title}\n"
        f"📂 *Kategori:* {category}\n"
        f"⚡ *Prioritas:* {(priority or '').upper()}\n"
        f"👤 *Pelapor:* {reporter_name}\n\n"
        f"Anda telah di-assign ke tiket ini.\n"
        f"Silakan login ke IT Helpdesk untuk detail lebih lanjut."
    )


def low_stock_alert(items: Iterable[dict], lead_time_days: int) -> str:
    """items: dicts with name, stock, min_stock and days_left"""
    lines = [
        f"• *{item['name']}*\n  Stok: {item['stock']} (min: {item['min_stock']})\n"
        f"  Sisa: {item['days_left']} hari"
        for item in items
    ]
    return (
        f"🚨 *PERINGATAN: Stok ATK Menipis*\n\n"
        + "\n\n".join(lines)
        + f"\n\n_Segera lakukan restock (lead time: {lead_time_days} hari)_"
    )


# Chat menu texts

def main_menu(name: str) -> str:
    return (
        f"Halo *{name}*! 👋\n\n"
        f"Selamat datang di IT Helpdesk.\n\n"
        f"Ketik angka untuk memilih:\n"
        f"*1.* 🎫 Buat Ticket Baru\n"
        f"*2.* 📋 Cek Status Ticket\n"
        f"*3.* 📦 Pinjam Asset\n"
        f"*4.* ❓ Bantuan"
    )


def category_menu() -> str:
    return (
        "📂 *Pilih Kategori Masalah:*\n\n"
        "*1.* 💻 Hardware (PC, Laptop, Printer, dll)\n"
        "*2.* 🖥️ Software (Aplikasi, Error, dll)\n"
        "*3.* 💾 Data (Backup, Recovery, dll)\n"
        "*4.* 🌐 Network (Internet, WiFi, dll)\n\n"
        "Ketik angka 1-4:"
    )


def priority_menu() -> str:
    return (
        "⚡ *Pilih Prioritas:*\n\n"
        "*1.* 🟢 Low (Bisa ditunda)\n"
        "*2.* 🟡 Medium (Perlu segera)\n"
        "*3.* 🟠 High (Penting)\n"
        "*4.* 🔴 Urgent (Sangat mendesak)\n\n"
        "Ketik angka 1-4:"
    )


def help_message() -> str:
    return (
        "❓ *Bantuan IT Helpdesk*\n\n"
        "*Cara Buat Ticket:*\n"
        "1. Ketik *1* atau *ticket*\n"
        "2. Pilih kategori (1-4)\n"
        "3. Pilih prioritas (1-4)\n"
        "4. Ketik deskripsi masalah\n\n"
        "*Cara Pinjam Asset:*\n"
        "1. Ketik *3* atau *pinjam*\n"
        "2. Ketik nama asset yang dicari\n"
        "3. Pilih asset dari hasil pencarian\n"
        "4. Ketik tujuan peminjaman\n\n"
        "*Commands:*\n"
        "• *1* atau *ticket* - Buat ticket baru\n"
        "• *2* atau *status* - Cek status ticket\n"
        "• *3* atau *pinjam* - Pinjam asset\n"
        "• *4* atau *help* - Tampilkan bantuan\n"
        "• *batal* - Batalkan proses"
    )


UNREGISTERED = (
    "❌ Nomor WhatsApp Anda belum terdaftar.\n\n"
    "Silakan hubungi Admin IT untuk mendaftarkan nomor Anda."
)

CANCELLED = "❌ Proses dibatalkan.\n\n"

INVALID_CHOICE = "❌ Pilihan tidak valid. Ketik angka 1-4.\n\n"

DESCRIPTION_PROMPT = (
    "📝 *Ketik deskripsi masalah Anda:*\n\n"
    "(Jelaskan secara singkat masalah yang dialami)"
)

TICKET_FAILED = "❌ Gagal membuat ticket. Silakan coba lagi.\n\nKetik *1* untuk mencoba lagi."

NO_TICKETS = "📋 Anda belum memiliki ticket.\n\nKetik *1* untuk buat ticket baru."

BORROW_SEARCH_PROMPT = (
    "📦 *Pinjam Asset*\n\n"
    "Ketik nama/jenis asset yang ingin Anda pinjam.\n"
    "Contoh: laptop, printer, proyektor\n\n"
    "Ketik *batal* untuk batalkan."
)

EMPTY_PURPOSE = "❌ Tujuan peminjaman tidak boleh kosong.\n\nKetik tujuan/alasan peminjaman:"

ASSET_UNAVAILABLE = "❌ Asset tidak tersedia untuk dipinjam.\n\nKetik *3* untuk cari asset lain."

BORROWING_FAILED = "❌ Gagal membuat request peminjaman.\n\nSilakan coba lagi atau hubungi Admin IT."

STATUS_EMOJIS = {
    'open': '🟡',
    'in_progress': '🔵',
    'resolved': '✅',
    'closed': '⚫',
}


def category_selected(category: str) -> str:
    return f"✅ Kategori: *{category.upper()}*\n\n" + priority_menu()


def priority_selected(priority: str) -> str:
    return f"✅ Prioritas: *{priority.upper()}*\n\n" + DESCRIPTION_PROMPT


def ticket_created(ticket_id: int, category: str, priority: str, description: str, assigned: bool) -> str:
    assigned_line = "\n✅ Ticket sudah di-assign ke teknisi." if assigned else ""
    return (
        f"✅ *TICKET BERHASIL DIBUAT!*\n\n"
        f"🆔 *ID:* #{ticket_id}\n"
        f"📂 *Kategori:* {category}\n"
        f"⚡ *Prioritas:* {priority}\n"
        f"📝 *Deskripsi:* {description}\n"
        f"{assigned_line}\n"
        f"Tim IT akan segera merespon ticket Anda.\n"
        f"Ketik *2* untuk cek status ticket."
    )


def ticket_list(lines: Iterable[str]) -> str:
    return "📋 *Ticket Anda (5 Terakhir):*\n\n" + "\n\n".join(lines)


def ticket_status_line(title: str, status: str, created: str) -> str:
    emoji = STATUS_EMOJIS.get(status, '⏳')
    return f"{emoji} *{title}*\n   Status: {status} | {created}"


def no_assets_found(keyword: str) -> str:
    return (
        f"❌ Asset \"{keyword}\" tidak ditemukan atau tidak tersedia untuk dipinjam.\n\n"
        f"Coba kata kunci lain atau ketik *batal* untuk kembali."
    )


def asset_list(lines: Iterable[str], count: int) -> str:
    return (
        "📦 *Asset Tersedia:*\n\n"
        + "\n\n".join(lines)
        + f"\n\nKetik angka (1-{count}) untuk memilih asset."
    )


def asset_line(index: int, name: str, location: str, asset_code: str) -> str:
    return f"*{index}.* {name}\n    📍 {location} | 📋 {asset_code}"


def invalid_asset_choice(count: int) -> str:
    return f"❌ Pilihan tidak valid. Ketik angka 1-{count}."


def asset_selected(name: str, location: str) -> str:
    return (
        f"✅ Asset dipilih: *{name}*\n\n"
        f"📍 Lokasi saat ini: {location}\n\n"
        f"📝 *Ketik tujuan/alasan peminjaman:*"
    )


def borrowing_created(asset_name: str, borrower_name: str, purpose: str) -> str:
    return (
        f"✅ *REQUEST PEMINJAMAN BERHASIL!*\n\n"
        f"📦 *Asset:* {asset_name}\n"
        f"👤 *Peminjam:* {borrower_name}\n"
        f"📝 *Tujuan:* {purpose}\n\n"
        f"⏳ Menunggu approval dari Admin IT.\n"
        f"Anda akan diberitahu via WhatsApp setelah disetujui."
    )
