"""Distilled HTML implementation rules for injection into generation prompts.

The web DSL says WHAT to build; these rules say HOW the page is written.
"""

# Imperative rules for LLM consumption. Keep them short: they ride along on
# every candidate generation call.
_IMPLEMENTATION_RULES = """\
- Output ONLY one complete, self-contained HTML document (html, head, body). \
No explanations, no XML tags, no markdown fences.
- The web DSL is the source of truth: implement every element, state and event it \
defines, with the same hierarchy. Where it lacks detail, infer without contradicting it.
- Style with Tailwind CSS utility classes. Avoid inline style attributes and custom \
<style> blocks unless a library needs them (e.g. sizing a chart canvas).
- Use jQuery for DOM manipulation and event binding. No inline onclick handlers; \
bind events in a <script> block with .on().
- Only CDN links for approved libraries (Tailwind, jQuery, Chart.js, D3.js, Leaflet, \
Monaco Editor). Placeholder images come from https://placehold.co.
- Every interactive element gets hover, focus and active states and is keyboard \
navigable. Add ARIA attributes to custom controls.
- Desktop-first layout with flexbox/grid and responsive breakpoint prefixes.
- Never fabricate numbers or data unless it is clearly placeholder content.
- Honour the user's preferred colours when given, keeping contrast accessible.\
"""


def load_implementation_rules() -> str:
    """Return the HTML implementation rules.

    Returns an empty string if the rules are disabled in config
    (set implementation_rules_enabled to false or remove it).
    """
    from oc.config import get_config

    config = get_config()
    if not config.get("implementation_rules_enabled", False):
        return ""

    return _IMPLEMENTATION_RULES
