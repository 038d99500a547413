"""Theme colors and color utilities for the UI."""


class NeonColors:
    """Dark terminal palette with neon accents."""

    BG_TOP = "#05070d"
    BG_BOTTOM = "#0b1220"
    PANEL_BG = "rgba(10, 18, 32, 0.92)"
    PANEL_BORDER = "#1b2a40"

    CYAN = "#00ffff"
    GREEN = "#00ff9f"
    MAGENTA = "#ff00ff"
    YELLOW = "#ffdd00"
    RED = "#ff2244"

    TEXT_PRIMARY = "#e6f1ff"
    TEXT_SECONDARY = "#8aa0b8"
    TEXT_MUTED = "#4b5b70"

    NODE_IDLE = "#111a2b"
    NODE_ACTIVE = "#003b46"
    NODE_DONE = "#0d2a22"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"


def timer_color(remaining: int, total: int) -> str:
    """Cyan above half time, yellow above a quarter, red below."""
    if total <= 0:
        return NeonColors.RED
    fraction = remaining / total
    if fraction > 0.5:
        return NeonColors.CYAN
    if fraction > 0.25:
        return NeonColors.YELLOW
    return NeonColors.RED
