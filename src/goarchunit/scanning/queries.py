"""Tree-sitter queries for Go.

Extracts:
    - Import specs (with optional alias)
    - Package-qualified calls (``pkg.Func(...)``)
    - Identifier, type identifier and selector references
"""

# Query for imports; the alias is optional
IMPORT_QUERY = """
(import_spec
    name: (_)? @import.name
    path: (_) @import.path
) @import
"""

# Query for calls through a package selector, e.g. context.WithValue(...)
QUALIFIED_CALL_QUERY = """
(call_expression
    function: (selector_expression
        operand: (identifier) @call.package
        field: (field_identifier) @call.function
    )
    arguments: (argument_list) @call.arguments
) @call
"""

# Query for references that may name package-level objects
REFERENCE_QUERY = """
(identifier) @ref.identifier
(type_identifier) @ref.type
(qualified_type
    package: (package_identifier) @ref.qualified.package
    name: (type_identifier) @ref.qualified.name
) @ref.qualified
(selector_expression
    operand: (_) @ref.selector.operand
    field: (field_identifier) @ref.selector.field
) @ref.selector
"""
