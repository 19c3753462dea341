"""Whole-program analyzers.

Each factory returns a Rule that ignores its objects argument and inspects
the application packages of the loaded artifact. ``best_practices`` chains
them all into one rule:

    >>> arch.check(best_practices(max_depth=3, config_folder="configs"))
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Optional, Sequence

from .exceptions import FileAccessError, ViolationCategory, ViolationError
from .logging_config import get_logger
from .model.entities import Variable
from .patterns import is_exported, is_mixed_caps
from .rules import Rule, chain_rules, depth_violations

if TYPE_CHECKING:
    from .engine import Architecture

logger = get_logger(__name__)

CONFIG_EXTENSIONS = frozenset({".yml", ".yaml", ".json", ".toml"})
TESTDATA_FOLDER = "testdata"


def _result(category: ViolationCategory, messages: list[str]) -> Optional[ViolationError]:
    return ViolationError(category, messages) if messages else None


def constants_should_be_consolidated() -> Rule:
    """Constants of a package belong in a single file."""

    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = []
        for pkg in arch.artifact.packages(application_only=True):
            files = pkg.constant_files()
            if len(files) > 1:
                names = ", ".join(os.path.basename(f) for f in files)
                messages.append(f"package <{pkg.id}> defines constants in multiple files: {names}")
        return _result(ViolationCategory.PACKAGE, messages)

    return check


def variables_should_be_used_in_defining_file() -> Rule:
    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = [
            f"package-level variable <{var.display_name}> in file "
            f"<{os.path.basename(var.file)}> is not used within the same file"
            for pkg in arch.artifact.packages(application_only=True)
            for var in pkg.variables_not_used_in_defining_file()
        ]
        return _result(ViolationCategory.VARIABLE, messages)

    return check


def configuration_files_should_be_in_folder(folder: str = "configs") -> Rule:
    """Every .yml/.yaml/.json/.toml file lives directly in ``<root>/<folder>``.

    Unlike a plain walk of the whole root, hidden directories and the
    configured ``exclude_dirs`` (by default ``vendor``, ``node_modules`` and
    ``testdata``) are not walked, so fixture and vendored config files are
    never reported. Pass ``exclude_dirs=()`` in the config to walk them too.
    """

    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        root = arch.artifact.root_dir
        allowed = os.path.join(root, folder)
        excluded = set(arch.config.exclude_dirs)

        def fail(error: OSError) -> None:
            raise FileAccessError(error.filename or root, error.strerror or str(error))

        messages = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=fail):
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and d not in excluded
            )
            for filename in sorted(filenames):
                if os.path.splitext(filename)[1] not in CONFIG_EXTENSIONS:
                    continue
                if dirpath != allowed:
                    path = os.path.join(dirpath, filename)
                    messages.append(
                        f"configuration file <{path}> is not in the allowed folder '{folder}'"
                    )
        return _result(ViolationCategory.FOLDER, messages)

    return check


def _reassignable_with_public_type(var: Variable) -> bool:
    typ = var.type.deref()
    if not typ.is_known:
        logger.debug(f"Type of {var.display_name} could not be inferred; treating it as public")
        return True
    if typ.is_named:
        return is_exported(typ.name)
    return True


def no_public_reassignable_variables() -> Rule:
    """Exported variables must have an unexported named type (e.g. private context keys)."""

    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = [
            f"exported variable <{var.display_name}> is re-assignable and has a public type, "
            "creating uncontrolled global state; consider making the variable private "
            "or using a private type"
            for var in arch.artifact.variables()
            if var.exported and _reassignable_with_public_type(var)
        ]
        return _result(ViolationCategory.VARIABLE, messages)

    return check


def no_unused_public_declarations() -> Rule:
    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = [
            f"public declaration <{name}> is not referred to from outside its package "
            "and should be private"
            for name in arch.artifact.unused_public_declarations()
        ]
        return _result(ViolationCategory.UNUSED_PUBLIC, messages)

    return check


def at_most_one_init_func_per_package() -> Rule:
    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = []
        for pkg in arch.artifact.packages(application_only=True):
            files = pkg.init_function_files()
            if len(files) > 1:
                names = ", ".join(os.path.basename(f) for f in files)
                messages.append(
                    f"package <{pkg.id}> has more than one init function in files: {names}"
                )
        return _result(ViolationCategory.PACKAGE, messages)

    return check


def error_should_be_last_return() -> Rule:
    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = []
        for fn in arch.artifact.functions() + arch.artifact.methods():
            index = fn.error_return_index()
            if index is not None and index != len(fn.returns) - 1:
                messages.append(
                    f"function <{fn.full_name}> returns an error, "
                    "but it is not the last return value"
                )
        return _result(ViolationCategory.FUNCTION, messages)

    return check


def test_data_should_be_in_testdata_folder() -> Rule:
    """Files opened or embedded by tests live under the package's testdata folder."""

    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = []
        for pkg, ref in arch.artifact.files_referenced_by_tests():
            if ref.path.endswith(".go"):
                continue
            testdata = os.path.join(os.path.dirname(ref.referrer), TESTDATA_FOLDER)
            if not ref.path.startswith(testdata + os.sep):
                messages.append(
                    f"test data file <{ref.path}> referenced by <{ref.referrer}> "
                    f"is not in the '{TESTDATA_FOLDER}' folder"
                )
        return _result(ViolationCategory.FOLDER, messages)

    return check


test_data_should_be_in_testdata_folder.__test__ = False  # type: ignore[attr-defined]


def packages_should_not_exceed_depth(max_depth: int = 3) -> Rule:
    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = depth_violations(
            arch.artifact.root_dir, arch.artifact.packages(application_only=True), max_depth
        )
        return _result(ViolationCategory.PACKAGE, messages)

    return check


def context_should_be_first_param() -> Rule:
    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = []
        for fn in arch.artifact.functions() + arch.artifact.methods():
            index = fn.context_param_index()
            if index is not None and index != 0:
                messages.append(
                    f"function <{fn.full_name}> takes context.Context as a parameter, "
                    "but it is not the first one"
                )
        return _result(ViolationCategory.FUNCTION, messages)

    return check


def context_keys_should_be_private_type() -> Rule:
    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = [
            f"a built-in or public type was used as a context key at {call.file}:{call.line}. "
            "To avoid key collisions, use a variable of a private type as the key."
            for call in arch.artifact.context_keys_with_public_type()
        ]
        return _result(ViolationCategory.CONTEXT, messages)

    return check


def constants_and_variables_should_be_grouped() -> Rule:
    """Imports, then one const block, then one var block, then types and funcs."""

    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = [
            f"{issue.file}:{issue.line}: {issue.description}"
            for issue in arch.artifact.unordered_declarations()
        ]
        return _result(ViolationCategory.PACKAGE, messages)

    return check


def package_named_as_folder(allow_main: bool = False) -> Rule:
    """The declared package name equals the last element of the package path.

    With ``allow_main``, packages named ``main`` may live in any folder.
    """

    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = []
        for pkg in arch.artifact.packages(application_only=True):
            folder = pkg.id.rsplit("/", 1)[-1]
            if allow_main and pkg.name == "main":
                continue
            if pkg.name and pkg.name != folder:
                messages.append(
                    f"package <{pkg.id}>'s name should be <{folder}> (the folder name), "
                    f"but is <{pkg.name}>"
                )
        return _result(ViolationCategory.PACKAGE, messages)

    return check


def variables_and_constants_should_use_mixed_caps() -> Rule:
    def check(arch: "Architecture", _objects: Sequence[Any] = ()) -> Optional[Exception]:
        messages = []
        for pkg in arch.artifact.packages(application_only=True):
            names = sorted({v.name for v in pkg.variables} | {c.name for c in pkg.constants})
            for name in names:
                if not is_mixed_caps(name):
                    messages.append(
                        f"identifier <{name}> in package <{pkg.id}> "
                        "should use MixedCaps instead of snake_case"
                    )
        return _result(ViolationCategory.NAMING, messages)

    return check


def best_practices(max_depth: int = 3, config_folder: str = "configs") -> Rule:
    """All analyzers above as a single rule."""
    return chain_rules(
        at_most_one_init_func_per_package(),
        configuration_files_should_be_in_folder(config_folder),
        constants_and_variables_should_be_grouped(),
        constants_should_be_consolidated(),
        context_should_be_first_param(),
        context_keys_should_be_private_type(),
        error_should_be_last_return(),
        no_public_reassignable_variables(),
        no_unused_public_declarations(),
        package_named_as_folder(),
        packages_should_not_exceed_depth(max_depth),
        test_data_should_be_in_testdata_folder(),
        variables_should_be_used_in_defining_file(),
        variables_and_constants_should_use_mixed_caps(),
    )
