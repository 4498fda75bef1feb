"""PIL-based key renderer for the Stream Deck frontend."""

import textwrap

from PIL import Image, ImageDraw, ImageFont

from reactivity.models import Feedback, SessionState

SIZE = (96, 96)
HUD_BG = "#111827"
EMPTY_BG = "#0a0a0a"

FEEDBACK_COLORS = {
    Feedback.CORRECT: "#22c55e",
    Feedback.WRONG: "#ef4444",
    Feedback.TOO_EARLY: "#b91c1c",
}

STATE_COLORS = {
    SessionState.INTRO: "#065f46",
    SessionState.ARMED: "#7f1d1d",   # wait / watch
    SessionState.ACTIVE: "#14532d",  # go / your turn
    SessionState.FEEDBACK: "#374151",
    SessionState.RESULT: "#7c2d12",
}

FONT_PATH = "/System/Library/Fonts/Helvetica.ttc"


def _font(size: int) -> ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(FONT_PATH, size)
    except OSError:
        return ImageFont.load_default()


def feedback_to_color(feedback: Feedback | None) -> str:
    """Map round feedback to a background color."""
    return FEEDBACK_COLORS.get(feedback, "#6b7280")


def state_to_color(state: SessionState) -> str:
    return STATE_COLORS.get(state, "#6b7280")


def dim(hex_color: str, factor: float = 0.3) -> str:
    """Darken a #rrggbb color for unlit palette tiles."""
    r, g, b = (int(hex_color[i:i + 2], 16) for i in (1, 3, 5))
    return "#{:02x}{:02x}{:02x}".format(int(r * factor), int(g * factor), int(b * factor))


def render_tile(color: str, size: tuple[int, int] = SIZE) -> Image.Image:
    """Solid color tile."""
    return Image.new("RGB", size, color)


def render_text_button(
    size: tuple[int, int] = SIZE,
    lines: list[str] | None = None,
    bg_color: str = HUD_BG,
    font_sizes: list[int] | None = None,
    colors: list[str] | None = None,
) -> Image.Image:
    """Render a text-only button — big readable text, no icon.

    lines: up to 4 lines of text, centered vertically
    font_sizes: per-line font sizes (default: [22] for 1 line, [18,14] for 2, etc.)
    colors: per-line colors (default: white, then progressively dimmer)
    """
    img = Image.new("RGB", size, bg_color)
    if not lines:
        return img

    draw = ImageDraw.Draw(img)
    n = len(lines)

    if not font_sizes:
        if n == 1:
            font_sizes = [22]
        elif n == 2:
            font_sizes = [18, 14]
        elif n == 3:
            font_sizes = [16, 13, 11]
        else:
            font_sizes = [14, 12, 10, 9]
    font_sizes = list(font_sizes)

    if not colors:
        palette = ["#ffffff", "#dddddd", "#aaaaaa", "#888888"]
        colors = palette[:n]
    colors = list(colors)

    # Pad to match lines count
    while len(font_sizes) < n:
        font_sizes.append(font_sizes[-1])
    while len(colors) < n:
        colors.append(colors[-1])

    fonts = [_font(s) for s in font_sizes]
    line_heights = [f.getbbox("Ag")[3] - f.getbbox("Ag")[1] for f in fonts]
    spacing = 4
    total_h = sum(line_heights) + spacing * (n - 1)
    y = (size[1] - total_h) // 2

    for i, text in enumerate(lines):
        draw.text(
            (size[0] // 2, y),
            text, font=fonts[i], fill=colors[i], anchor="mt",
        )
        y += line_heights[i] + spacing

    return img


def render_hud(title: str, value: str, value_color: str = "#ffffff",
               size: tuple[int, int] = SIZE) -> Image.Image:
    """Two-line HUD cell: small gray caption over a big value."""
    return render_text_button(
        size=size, lines=[title, value], bg_color=HUD_BG,
        font_sizes=[14, 22], colors=["#9ca3af", value_color],
    )


def render_feedback(feedback: Feedback | None, size: tuple[int, int] = SIZE) -> Image.Image:
    mark = {Feedback.CORRECT: "OK", Feedback.WRONG: "X", Feedback.TOO_EARLY: "TOO\nEARLY"}.get(feedback, "")
    return render_text_button(
        size=size, lines=mark.split("\n") if mark else None,
        bg_color=feedback_to_color(feedback), font_sizes=[26, 26],
    )


def wrap_lines(text: str, width: int = 10, per_key: int = 3) -> list[list[str]]:
    """Split a sentence into per-key chunks of at most ``per_key`` lines."""
    lines = textwrap.wrap(text, width=width)
    return [lines[i:i + per_key] for i in range(0, len(lines), per_key)]


def render_countdown(time_left_ms: float, window_ms: float, size: tuple[int, int] = SIZE) -> Image.Image:
    """Seconds left in the round over a bar that shrinks with them."""
    frac = max(0.0, min(1.0, time_left_ms / window_ms)) if window_ms > 0 else 0.0
    if frac > 0.5:
        color = "#22c55e"
    elif frac > 0.25:
        color = "#eab308"
    else:
        color = "#ef4444"
    img = render_text_button(
        size=size, lines=["TIME", f"{time_left_ms / 1000:.1f}s"], bg_color=HUD_BG,
        font_sizes=[14, 22], colors=["#9ca3af", color],
    )
    width = int(size[0] * frac)
    if width > 0:
        draw = ImageDraw.Draw(img)
        draw.rectangle([0, size[1] - 8, width - 1, size[1] - 1], fill=color)
    return img
