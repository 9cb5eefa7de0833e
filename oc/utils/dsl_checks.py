"""DSL structure check — deterministic validation of a synthesized Web DSL.

Returns a list of issues. If empty, every parent link and event target
resolves. Issues are advisory: the DSL still steers generation.
"""

from oc.models import WebDSL


def check_dsl_structure(dsl: WebDSL) -> list[str]:
    """Check that the element tree and event bindings are internally consistent.

    Returns a list of issue strings. Empty list = consistent.
    """
    issues = []

    if not dsl.elements:
        issues.append("DSL defines no elements.")
        return issues  # Can't check further without elements

    element_ids = set()
    for element in dsl.elements:
        if element.id in element_ids:
            issues.append(f"Duplicate element id '{element.id}'.")
        element_ids.add(element.id)
    state_names = {state.name for state in dsl.states}

    # --- Parents must reference defined elements ---
    for element in dsl.elements:
        if element.parent_id and element.parent_id not in element_ids:
            issues.append(
                f"Element '{element.id}' has parent '{element.parent_id}' "
                f"which is not defined."
            )

    # --- Event effects must target an element or a state ---
    for element in dsl.elements:
        for event in element.events:
            for effect in event.affects:
                if effect.target not in element_ids and effect.target not in state_names:
                    issues.append(
                        f"Event '{event.type}' on '{element.id}' affects "
                        f"'{effect.target}' which is neither an element nor a state."
                    )

    # --- No cycles in the parent chain (DFS cycle detection) ---
    parent_of = {
        e.id: e.parent_id for e in dsl.elements if e.parent_id in element_ids
    }

    visited = set()
    for start in parent_of:
        if start in visited:
            continue
        path = []
        on_path = set()
        node = start
        while node in parent_of and node not in visited:
            visited.add(node)
            on_path.add(node)
            path.append(node)
            node = parent_of[node]
            if node in on_path:
                issues.append(f"Circular parent chain: {' -> '.join(path + [node])}.")
                break

    return issues
