"""
Formatting Rule Models
======================
Typed view over the TRADOS rule-set JSON stored in ``formatting_rules.rules_json``.
"""
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from trados_translator.config import config
from trados_translator.config.constants import (
    DEFAULT_RULES,
    LOCALE_RULE_OVERRIDES,
    LINE_HEIGHTS,
    ALIGNMENTS
)


def merge_rule_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``override`` on top of ``base``; override wins for every key it defines."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_rule_dicts(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


@dataclass
class FontSpec:
    name: str = "Times New Roman"
    size: float = 12
    language: Optional[str] = None


@dataclass
class Margins:
    """Page margins in centimeters."""
    top: float = 2.54
    bottom: float = 2.54
    left: float = 3.17
    right: float = 3.17
    gutter: float = 0
    orientation: str = "portrait"


@dataclass
class ParagraphRules:
    """Spacing in points, indents in centimeters."""
    spacing_before: float = 6
    spacing_after: float = 6
    line_spacing: str = "single"
    alignment: str = "justify"
    indent_left: float = 1
    indent_right: float = 0
    hanging_indent: float = 1

    @property
    def line_height(self) -> float:
        return LINE_HEIGHTS.get(str(self.line_spacing).lower(), 1.0)

    @property
    def text_align(self) -> str:
        value = str(self.alignment).lower()
        return value if value in ALIGNMENTS else "justify"


@dataclass
class CleaningRules:
    remove_multiple_spaces: bool = True
    remove_optional_hyphens: bool = True
    replace_manual_line_breaks: bool = True


@dataclass
class NumberingStyle:
    style: str
    format: str


@dataclass
class NumberingRules:
    preamble: NumberingStyle = field(default_factory=lambda: NumberingStyle("parenthesized", "(1)"))
    main_body: NumberingStyle = field(default_factory=lambda: NumberingStyle("period", "1."))
    letters: NumberingStyle = field(default_factory=lambda: NumberingStyle("parenthesized", "(a)"))


@dataclass
class PageBreakRules:
    before_annexes: bool = True
    before_tables: bool = True


@dataclass
class TabRules:
    use_tabs_after_manual_numbers: bool = True


@dataclass
class FormattingRuleSet:
    """Complete rendering configuration."""
    main_font: FontSpec = field(default_factory=FontSpec)
    footnote_font: FontSpec = field(default_factory=lambda: FontSpec(size=10, language="en-GB"))
    margins: Margins = field(default_factory=Margins)
    paragraph: ParagraphRules = field(default_factory=ParagraphRules)
    cleaning: CleaningRules = field(default_factory=CleaningRules)
    numbering: NumberingRules = field(default_factory=NumberingRules)
    page_breaks: PageBreakRules = field(default_factory=PageBreakRules)
    tabs: TabRules = field(default_factory=TabRules)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'FormattingRuleSet':
        """
        Build from the camelCase JSON shape.

        Missing keys are taken from the built-in defaults. Raises
        ``TypeError``/``ValueError`` for values of the wrong type.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TypeError("rule set must be a JSON object")
        d = merge_rule_dicts(DEFAULT_RULES, data)

        fonts, margins, para = d["fonts"], d["margins"], d["paragraph"]
        cleaning, numbering = d["cleaning"], d["numbering"]

        return cls(
            main_font=FontSpec(
                name=str(fonts["main"]["name"]),
                size=float(fonts["main"]["size"]),
            ),
            footnote_font=FontSpec(
                name=str(fonts["footnotes"]["name"]),
                size=float(fonts["footnotes"]["size"]),
                language=fonts["footnotes"].get("language"),
            ),
            margins=Margins(
                top=float(margins["top"]),
                bottom=float(margins["bottom"]),
                left=float(margins["left"]),
                right=float(margins["right"]),
                gutter=float(margins.get("gutter") or 0),
                orientation=str(margins.get("orientation") or "portrait"),
            ),
            paragraph=ParagraphRules(
                spacing_before=float(para["spacingBefore"]),
                spacing_after=float(para["spacingAfter"]),
                line_spacing=str(para["lineSpacing"]),
                alignment=str(para["alignment"]),
                indent_left=float(para["indentLeft"]),
                indent_right=float(para.get("indentRight") or 0),
                hanging_indent=float(para["hangingIndent"]),
            ),
            cleaning=CleaningRules(
                remove_multiple_spaces=bool(cleaning["removeMultipleSpaces"]),
                remove_optional_hyphens=bool(cleaning["removeOptionalHyphens"]),
                replace_manual_line_breaks=bool(cleaning["replaceManualLineBreaks"]),
            ),
            numbering=NumberingRules(
                preamble=NumberingStyle(**numbering["preamble"]),
                main_body=NumberingStyle(**numbering["mainBody"]),
                letters=NumberingStyle(**numbering["letters"]),
            ),
            page_breaks=PageBreakRules(
                before_annexes=bool(d["pageBreaks"]["beforeAnnexes"]),
                before_tables=bool(d["pageBreaks"]["beforeTables"]),
            ),
            tabs=TabRules(
                use_tabs_after_manual_numbers=bool(d["tabs"]["useTabsAfterManualNumbers"]),
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the camelCase JSON shape."""
        return {
            "fonts": {
                "main": {"name": self.main_font.name, "size": self.main_font.size},
                "footnotes": {
                    "name": self.footnote_font.name,
                    "size": self.footnote_font.size,
                    "language": self.footnote_font.language,
                },
            },
            "margins": {
                "top": self.margins.top,
                "bottom": self.margins.bottom,
                "left": self.margins.left,
                "right": self.margins.right,
                "gutter": self.margins.gutter,
                "orientation": self.margins.orientation,
            },
            "paragraph": {
                "spacingBefore": self.paragraph.spacing_before,
                "spacingAfter": self.paragraph.spacing_after,
                "lineSpacing": self.paragraph.line_spacing,
                "alignment": self.paragraph.alignment,
                "indentLeft": self.paragraph.indent_left,
                "indentRight": self.paragraph.indent_right,
                "hangingIndent": self.paragraph.hanging_indent,
            },
            "cleaning": {
                "removeMultipleSpaces": self.cleaning.remove_multiple_spaces,
                "removeOptionalHyphens": self.cleaning.remove_optional_hyphens,
                "replaceManualLineBreaks": self.cleaning.replace_manual_line_breaks,
            },
            "numbering": {
                "preamble": {"style": self.numbering.preamble.style, "format": self.numbering.preamble.format},
                "mainBody": {"style": self.numbering.main_body.style, "format": self.numbering.main_body.format},
                "letters": {"style": self.numbering.letters.style, "format": self.numbering.letters.format},
            },
            "pageBreaks": {
                "beforeAnnexes": self.page_breaks.before_annexes,
                "beforeTables": self.page_breaks.before_tables,
            },
            "tabs": {"useTabsAfterManualNumbers": self.tabs.use_tabs_after_manual_numbers},
        }


def resolve_rules(rules_json: Optional[Dict[str, Any]], target_lang: Optional[str]) -> FormattingRuleSet:
    """
    Build the rule set used for rendering.

    When ``target_lang`` is the configured default locale, its built-in
    override is merged on top of the selected rules.
    """
    data = rules_json or {}
    if target_lang and target_lang == config.rendering.default_locale:
        override = LOCALE_RULE_OVERRIDES.get(target_lang)
        if override:
            data = merge_rule_dicts(data, override)
    return FormattingRuleSet.from_dict(data)
