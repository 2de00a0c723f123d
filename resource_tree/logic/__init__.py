"""Client-side state and behaviour of the resource browser.

This package holds everything that does not talk HTTP itself:
- Current directory, listing refresh and breadcrumbs
- Selection of the displayed nodes
- Move destination resolution and display access derivation
- Sequential bulk actions and error reporting

Requests go through ``resource_tree.infrastructure``.
"""
