"""
goarchunit - Architecture conformance tests for Go projects

Loads a Go module into an immutable model of packages, types, functions,
variables and files, then checks layering, dependency, naming, visibility
and location rules against it, plus a set of whole-program best practices.
"""

__version__ = "0.3.0"

from .analyzers import (
    at_most_one_init_func_per_package,
    best_practices,
    configuration_files_should_be_in_folder,
    constants_and_variables_should_be_grouped,
    constants_should_be_consolidated,
    context_keys_should_be_private_type,
    context_should_be_first_param,
    error_should_be_last_return,
    no_public_reassignable_variables,
    no_unused_public_declarations,
    package_named_as_folder,
    packages_should_not_exceed_depth,
    test_data_should_be_in_testdata_folder,
    variables_and_constants_should_use_mixed_caps,
    variables_should_be_used_in_defining_file,
)
from .api import (
    arch_layer,
    arch_unit,
    check,
    current,
    functions,
    layers,
    methods_of,
    packages,
    reset,
    source_files,
    test_files,
    types,
    types_embedding,
    types_implementing,
    validate,
    variables_of_type,
)
from .config import ArchConfig, LayerConfig, load_config
from .engine import Architecture
from .exceptions import (
    ArchitectureViolations,
    ArchUnitError,
    ViolationCategory,
    ViolationError,
)
from .matchers import (
    all_of,
    any_of,
    be_snake_case,
    have_name_prefix,
    have_name_suffix,
    in_package,
    match_folder,
    name_contains,
    name_matches,
    not_,
    with_name,
)
from .rules import chain_rules

__all__ = [
    "arch_unit",  # Main entry point
    "arch_layer",
    "reset",
    "current",
    "Architecture",
    "ArchConfig",
    "LayerConfig",
    "load_config",
    # Selections
    "layers",
    "packages",
    "types",
    "types_implementing",
    "types_embedding",
    "functions",
    "methods_of",
    "variables_of_type",
    "source_files",
    "test_files",
    "validate",
    "check",
    # Matchers
    "with_name",
    "have_name_prefix",
    "have_name_suffix",
    "in_package",
    "name_matches",
    "name_contains",
    "be_snake_case",
    "match_folder",
    "all_of",
    "any_of",
    "not_",
    # Rules
    "chain_rules",
    "best_practices",
    "at_most_one_init_func_per_package",
    "configuration_files_should_be_in_folder",
    "constants_and_variables_should_be_grouped",
    "constants_should_be_consolidated",
    "context_keys_should_be_private_type",
    "context_should_be_first_param",
    "error_should_be_last_return",
    "no_public_reassignable_variables",
    "no_unused_public_declarations",
    "package_named_as_folder",
    "packages_should_not_exceed_depth",
    "test_data_should_be_in_testdata_folder",
    "variables_and_constants_should_use_mixed_caps",
    "variables_should_be_used_in_defining_file",
    # Errors
    "ArchUnitError",
    "ArchitectureViolations",
    "ViolationCategory",
    "ViolationError",
]
