"""Keyword-based icon inference for notes.

Icons are identified by a closed set of names (``IconKind``). Inference is a
linear scan of an ordered keyword table: the first keyword found anywhere in
the lower-cased content wins, so table order is part of the contract.
"""

from enum import Enum


class IconKind(str, Enum):
    """Icon vocabulary understood by the API and the dashboard."""

    BRIEFCASE = "Briefcase"
    BUILDING = "Building2"
    USERS = "Users"
    FOLDER_OPEN = "FolderOpen"
    CHECK_SQUARE = "CheckSquare"
    CALENDAR = "Calendar"
    PRESENTATION = "Presentation"
    FILE_TEXT = "FileText"
    DOLLAR_SIGN = "DollarSign"
    TRENDING_UP = "TrendingUp"
    LIGHTBULB = "Lightbulb"
    PALETTE = "Palette"
    PEN_TOOL = "PenTool"
    IMAGE = "Image"
    MUSIC = "Music"
    PEN = "Pen"
    BOOK_OPEN = "BookOpen"
    FEATHER = "Feather"
    CPU = "Cpu"
    CODE = "Code"
    SMARTPHONE = "Smartphone"
    GLOBE = "Globe"
    DATABASE = "Database"
    SHIELD = "Shield"
    BRAIN = "Brain"
    BAR_CHART = "BarChart3"
    USER = "User"
    HEART = "Heart"
    ACTIVITY = "Activity"
    PLANE = "Plane"
    MAP_PIN = "MapPin"
    HOME = "Home"
    UTENSILS = "Utensils"
    CHEF_HAT = "ChefHat"
    SHOPPING_CART = "ShoppingCart"
    BOOK = "Book"
    SEARCH = "Search"
    GRADUATION_CAP = "GraduationCap"
    LANGUAGES = "Languages"
    CALCULATOR = "Calculator"
    MICROSCOPE = "Microscope"
    CLOCK = "Clock"
    TARGET = "Target"
    MAP = "Map"
    CHESS = "Chess"
    EYE = "Eye"
    STAR = "Star"
    ROCKET = "Rocket"
    TROPHY = "Trophy"
    AWARD = "Award"
    ALERT_TRIANGLE = "AlertTriangle"
    CHECK_CIRCLE = "CheckCircle"
    BUG = "Bug"
    WRENCH = "Wrench"
    ZAP = "Zap"
    MAIL = "Mail"
    PHONE = "Phone"
    MESSAGE_SQUARE = "MessageSquare"
    MESSAGE_CIRCLE = "MessageCircle"
    SHARE = "Share2"
    NETWORK = "Network"

    @classmethod
    def parse(cls, key: str | None) -> "IconKind":
        """Resolve a stored or model-supplied key, falling back to the default icon."""
        if not key:
            return DEFAULT_ICON
        try:
            return cls(key)
        except ValueError:
            pass
        lowered = key.strip().lower()
        for kind in cls:
            if kind.value.lower() == lowered:
                return kind
        return DEFAULT_ICON


DEFAULT_ICON = IconKind.FILE_TEXT

# Order matters: first match wins.
ICON_KEYWORDS: dict[str, IconKind] = {
    # Work & business
    "work": IconKind.BRIEFCASE,
    "business": IconKind.BUILDING,
    "meeting": IconKind.USERS,
    "project": IconKind.FOLDER_OPEN,
    "task": IconKind.CHECK_SQUARE,
    "deadline": IconKind.CALENDAR,
    "presentation": IconKind.PRESENTATION,
    "report": IconKind.FILE_TEXT,
    "budget": IconKind.DOLLAR_SIGN,
    "finance": IconKind.TRENDING_UP,
    # Ideas & creativity
    "idea": IconKind.LIGHTBULB,
    "creative": IconKind.PALETTE,
    "design": IconKind.PEN_TOOL,
    "art": IconKind.IMAGE,
    "music": IconKind.MUSIC,
    "writing": IconKind.PEN,
    "story": IconKind.BOOK_OPEN,
    "poetry": IconKind.FEATHER,
    # Technology
    "tech": IconKind.CPU,
    "code": IconKind.CODE,
    "app": IconKind.SMARTPHONE,
    "website": IconKind.GLOBE,
    "database": IconKind.DATABASE,
    "security": IconKind.SHIELD,
    "ai": IconKind.BRAIN,
    "data": IconKind.BAR_CHART,
    # Personal & life
    "personal": IconKind.USER,
    "family": IconKind.USERS,
    "health": IconKind.HEART,
    "fitness": IconKind.ACTIVITY,
    "travel": IconKind.PLANE,
    "vacation": IconKind.MAP_PIN,
    "home": IconKind.HOME,
    "food": IconKind.UTENSILS,
    "recipe": IconKind.CHEF_HAT,
    "shopping": IconKind.SHOPPING_CART,
    # Learning & education
    "study": IconKind.BOOK,
    "research": IconKind.SEARCH,
    "course": IconKind.GRADUATION_CAP,
    "language": IconKind.LANGUAGES,
    "math": IconKind.CALCULATOR,
    "science": IconKind.MICROSCOPE,
    "history": IconKind.CLOCK,
    "philosophy": IconKind.BRAIN,
    # Goals & planning
    "goal": IconKind.TARGET,
    "plan": IconKind.MAP,
    "strategy": IconKind.CHESS,
    "vision": IconKind.EYE,
    "dream": IconKind.STAR,
    "future": IconKind.ROCKET,
    "success": IconKind.TROPHY,
    "achievement": IconKind.AWARD,
    # Problems & solutions
    "problem": IconKind.ALERT_TRIANGLE,
    "solution": IconKind.CHECK_CIRCLE,
    "bug": IconKind.BUG,
    "fix": IconKind.WRENCH,
    "improvement": IconKind.TRENDING_UP,
    "optimization": IconKind.ZAP,
    # Communication
    "email": IconKind.MAIL,
    "phone": IconKind.PHONE,
    "message": IconKind.MESSAGE_SQUARE,
    "chat": IconKind.MESSAGE_CIRCLE,
    "social": IconKind.SHARE,
    "network": IconKind.NETWORK,
}

# Checked in order after the keyword table.
SECONDARY_PATTERNS: list[tuple[tuple[str, ...], IconKind]] = [
    (("todo", "task"), IconKind.CHECK_SQUARE),
    (("meeting", "call"), IconKind.USERS),
    (("idea", "thought"), IconKind.LIGHTBULB),
    (("recipe", "cook"), IconKind.CHEF_HAT),
    (("travel", "trip"), IconKind.PLANE),
    (("work", "job"), IconKind.BRIEFCASE),
    (("study", "learn"), IconKind.BOOK),
    (("goal", "target"), IconKind.TARGET),
    (("problem", "issue"), IconKind.ALERT_TRIANGLE),
    (("code", "programming"), IconKind.CODE),
]


def infer_icon(content: str | None) -> IconKind:
    """Pick an icon for the given text.

    Args:
        content: Free text (note body, chat message, ...)

    Returns:
        The icon of the first matching keyword, else the first matching
        secondary pattern, else ``DEFAULT_ICON``.
    """
    if not content:
        return DEFAULT_ICON

    lowered = content.lower()

    for keyword, icon in ICON_KEYWORDS.items():
        if keyword in lowered:
            return icon

    for patterns, icon in SECONDARY_PATTERNS:
        if any(pattern in lowered for pattern in patterns):
            return icon

    return DEFAULT_ICON
