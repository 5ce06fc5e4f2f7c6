"""Terminal rendering for notes, chats and icons."""

from api.services.icons import DEFAULT_ICON, IconKind

ICON_GLYPHS: dict[IconKind, str] = {
    IconKind.BRIEFCASE: "💼",
    IconKind.BUILDING: "🏢",
    IconKind.USERS: "👥",
    IconKind.FOLDER_OPEN: "📂",
    IconKind.CHECK_SQUARE: "☑️",
    IconKind.CALENDAR: "📅",
    IconKind.PRESENTATION: "📽️",
    IconKind.FILE_TEXT: "📄",
    IconKind.DOLLAR_SIGN: "💲",
    IconKind.TRENDING_UP: "📈",
    IconKind.LIGHTBULB: "💡",
    IconKind.PALETTE: "🎨",
    IconKind.PEN_TOOL: "🖋️",
    IconKind.IMAGE: "🖼️",
    IconKind.MUSIC: "🎵",
    IconKind.PEN: "🖊️",
    IconKind.BOOK_OPEN: "📖",
    IconKind.FEATHER: "🪶",
    IconKind.CPU: "🔲",
    IconKind.CODE: "💻",
    IconKind.SMARTPHONE: "📱",
    IconKind.GLOBE: "🌐",
    IconKind.DATABASE: "🗄️",
    IconKind.SHIELD: "🛡️",
    IconKind.BRAIN: "🧠",
    IconKind.BAR_CHART: "📊",
    IconKind.USER: "👤",
    IconKind.HEART: "❤️",
    IconKind.ACTIVITY: "💓",
    IconKind.PLANE: "✈️",
    IconKind.MAP_PIN: "📍",
    IconKind.HOME: "🏠",
    IconKind.UTENSILS: "🍴",
    IconKind.CHEF_HAT: "🧑‍🍳",
    IconKind.SHOPPING_CART: "🛒",
    IconKind.BOOK: "📕",
    IconKind.SEARCH: "🔍",
    IconKind.GRADUATION_CAP: "🎓",
    IconKind.LANGUAGES: "🈯",
    IconKind.CALCULATOR: "🧮",
    IconKind.MICROSCOPE: "🔬",
    IconKind.CLOCK: "🕒",
    IconKind.TARGET: "🎯",
    IconKind.MAP: "🗺️",
    IconKind.CHESS: "♟️",
    IconKind.EYE: "👁️",
    IconKind.STAR: "⭐",
    IconKind.ROCKET: "🚀",
    IconKind.TROPHY: "🏆",
    IconKind.AWARD: "🏅",
    IconKind.ALERT_TRIANGLE: "⚠️",
    IconKind.CHECK_CIRCLE: "✅",
    IconKind.BUG: "🐛",
    IconKind.WRENCH: "🔧",
    IconKind.ZAP: "⚡",
    IconKind.MAIL: "✉️",
    IconKind.PHONE: "📞",
    IconKind.MESSAGE_SQUARE: "🗨️",
    IconKind.MESSAGE_CIRCLE: "💬",
    IconKind.SHARE: "🔗",
    IconKind.NETWORK: "🕸️",
}

SUMMARY_PREVIEW_LENGTH = 80


def render_icon(icon: IconKind | str | None) -> str:
    """Glyph for an icon. Unknown or missing icons render as the default."""
    if not isinstance(icon, IconKind):
        icon = IconKind.parse(icon) if icon else DEFAULT_ICON
    return ICON_GLYPHS[icon]


def _preview(text: str | None, length: int = SUMMARY_PREVIEW_LENGTH) -> str:
    text = " ".join((text or "").split())
    if len(text) <= length:
        return text
    return text[: length - 3] + "..."


def render_note_list(notes: list[dict], selected_id: str | None = None) -> str:
    if not notes:
        return "No notes yet. Use /note to create one."

    lines = []
    for i, note in enumerate(notes, 1):
        marker = "▶" if note["id"] == selected_id else " "
        lines.append(f"{marker} {i}. {render_icon(note.get('icon'))} {note['title']}")
        summary = _preview(note.get("summary"))
        if summary:
            lines.append(f"      {summary}")
    return "\n".join(lines)


def render_note(note: dict) -> str:
    lines = [
        f"{render_icon(note.get('icon'))} {note['title']}",
        f"ID: {note['id']}",
        f"Updated: {note['updated_at']}",
    ]
    if note.get("summary"):
        lines += ["", "Summary:", note["summary"]]
    lines += ["", "-" * 60, note["content"], "-" * 60]
    return "\n".join(lines)


def render_chat_list(chats: list[dict], selected_id: str | None = None) -> str:
    if not chats:
        return "No chats yet. Send a message to start one."

    lines = []
    for i, chat in enumerate(chats, 1):
        marker = "▶" if chat["id"] == selected_id else " "
        about = f" (about: {chat['note']['title']})" if chat.get("note") else ""
        count = len(chat.get("messages", []))
        lines.append(f"{marker} {i}. {chat['title']}{about} - {count} messages")
    return "\n".join(lines)


def render_chat(chat: dict) -> str:
    lines = [f"=== {chat['title']} ==="]
    if chat.get("note"):
        lines.append(f"About note: {chat['note']['title']}")
    lines.append("")

    messages = chat.get("messages", [])
    if not messages:
        lines.append("(no messages yet)")
    for message in messages:
        speaker = "You" if message["role"] == "user" else "Assistant"
        lines.append(f"{speaker}: {message['content']}")
        lines.append("")
    return "\n".join(lines).rstrip()
