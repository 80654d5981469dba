"""CSS generation for definition-list styling."""

from __future__ import annotations

from .config import DeflistConfig, normalize_config, validate_config
from .constants import STYLE_CLASSES
from .models import StyleTag

DEFAULT_MARKER_WIDTH = 18


def render_css_variables(config: DeflistConfig | None = None, marker_width: int = DEFAULT_MARKER_WIDTH) -> str:
    """Render the ``:root`` block holding the styling variables.

    Args:
        config: Styling configuration. Defaults to a new `DeflistConfig`.
        marker_width: Rendered width of the marker in pixels, used to pull
            the marker back into the definition's indentation.

    Returns:
        str: CSS text.

    Raises:
        ConfigError: If the configuration fails validation.

    Examples:
        render_css_variables(DeflistConfig(term_bold=False))
    """
    config = normalize_config(config or DeflistConfig())
    validate_config(config)

    return (
        ":root {\n"
        f"    --dtcolor: {config.term_color};\n"
        f"    --dtweight: {'bold' if config.term_bold else 'inherit'};\n"
        f"    --dtstyle: {'italic' if config.term_italic else 'inherit'};\n"
        f"    --ddindentation: {config.definition_indentation}px;\n"
        f"    --ddmarkerindent: -{round(marker_width)}px;\n"
        "}\n"
    )


def render_stylesheet(config: DeflistConfig | None = None, marker_width: int = DEFAULT_MARKER_WIDTH) -> str:
    """Render the variables followed by the rules that use them."""
    term = STYLE_CLASSES[StyleTag.TERM]
    definition = STYLE_CLASSES[StyleTag.DEFINITION]
    list_item = STYLE_CLASSES[StyleTag.DEFINITION_LIST_ITEM]
    marker = STYLE_CLASSES[StyleTag.MARKER]

    rules = f"""
.{term}, dl > dt {{
    color: var(--dtcolor);
    font-weight: var(--dtweight);
    font-style: var(--dtstyle);
}}
.{definition}, dl > dd {{
    padding-inline-start: var(--ddindentation);
}}
.{definition} .{marker} {{
    margin-inline-start: var(--ddmarkerindent);
}}
.{list_item} {{
    padding-inline-start: var(--ddindentation);
}}
dl > dd {{
    margin-inline-start: 0;
}}
"""
    return render_css_variables(config, marker_width) + rules
