"""Built-in risk rules, one module per risk category.

Each module exposes ``CATEGORY``, ``SUPPORTED_TAGS``, ``generate_risks(ctx)``
and the assembled ``RULE``.
"""
