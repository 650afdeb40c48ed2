"""Import of user extensions and plugins.

References take one of two forms:

- ``"package.module:Attr"``: import ``package.module`` and take ``Attr``;
- ``"path/to/file.py:Attr"``: load the file as a module and take ``Attr``.

``:Attr`` may be omitted, in which case the caller's default attribute name is
used (``Extension`` for extensions, ``Plugin`` for plugins).
"""

import importlib
import importlib.util
import sys
from pathlib import Path
from typing import Any, Tuple

from ai_cmd.core.logging_config import get_logger

from .errors import ExtensionLoadError

logger = get_logger(__name__)


def split_reference(ref: str, default_attr: str) -> Tuple[str, str]:
    target, sep, attr = ref.strip().rpartition(":")
    if not sep:
        return ref.strip(), default_attr
    # a bare Windows drive letter ("C:\\x.py") is not an attribute separator
    if len(target) == 1 and attr.startswith(("\\", "/")):
        return ref.strip(), default_attr
    return target, attr.strip() or default_attr


def _import_file(path: Path) -> Any:
    module_name = f"ai_cmd_user_{path.stem}_{abs(hash(str(path)))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ExtensionLoadError(f"cannot load module from {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def load_object(ref: str, default_attr: str) -> Any:
    """
    Resolve a reference to the object it names.

    Raises:
        ExtensionLoadError: If the module cannot be imported or lacks the attribute.
    """
    target, attr = split_reference(ref, default_attr)
    if not target:
        raise ExtensionLoadError(f"empty reference: {ref!r}")
    try:
        if target.endswith(".py") or "/" in target or "\\" in target:
            path = Path(target).expanduser().resolve()
            if not path.is_file():
                raise ExtensionLoadError(f"file not found: {path}")
            module = _import_file(path)
        else:
            module = importlib.import_module(target)
    except ExtensionLoadError:
        raise
    except Exception as e:
        raise ExtensionLoadError(f"cannot import {target}: {e}") from e

    try:
        obj = getattr(module, attr)
    except AttributeError as e:
        raise ExtensionLoadError(f"{target} has no attribute {attr!r}") from e
    logger.debug(f"Loaded {attr} from {target}")
    return obj
