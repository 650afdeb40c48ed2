from __future__ import annotations

"""Built-in capabilities.

``DefaultExtension`` is always registered first, so its capabilities carry
the ``_0`` suffix (``read_file_0``, ``execute_command_0``, ...).

File helpers resolve paths against the current working directory and never
raise: they return ``True``/``False`` (``None`` or ``[]`` for lookups) and log
the error. ``execute_command``, ``request_ai`` and ``execute_code`` raise on
failure so the dispatcher records the step as failed.
"""

import datetime
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from ..abstraction.prompts import TEXT_PROCESSING_PROMPT
from ..errors import CommandFailedError
from ..schemas.domain import CapabilityKind, ChatMessage
from .base import BaseExtension, CapabilityDescriptor

logger = logging.getLogger(__name__)


def _fn(name: str, params: List[str], description: str) -> CapabilityDescriptor:
    return CapabilityDescriptor(name=name, kind=CapabilityKind.function, params=params, description=description)


def _value(name: str, description: str) -> CapabilityDescriptor:
    return CapabilityDescriptor(name=name, kind=CapabilityKind.value, description=description)


class DefaultExtension(BaseExtension):
    """File, command, completion and code capabilities shipped with ai-cmd."""

    httpx = httpx
    datetime = datetime
    shutil = shutil

    def describe_capabilities(self) -> List[CapabilityDescriptor]:
        return [
            _fn("create_file", ["file_path", "content"], "Create a file with the given content, creating parent directories"),
            _fn("create_directory", ["dir_path"], "Create a directory, including missing parents"),
            _fn("modify_file", ["file_path", "content"], "Overwrite an existing file; returns false if it does not exist"),
            _fn("read_file", ["file_path"], "Read a file and return its content as a string, or null if missing"),
            _fn("append_to_file", ["file_path", "content"], "Append content to an existing file"),
            _fn("file_exists", ["file_path"], "Return true if the path exists, false otherwise"),
            _fn("delete_file", ["file_path"], "Delete a file"),
            _fn("delete_directory", ["dir_path"], "Delete a directory and everything in it"),
            _fn("rename", ["old_path", "new_path"], "Rename a file or directory"),
            _fn("move_file", ["source_path", "destination_path"], "Move a file, creating the destination directory"),
            _fn("get_file_info", ["file_path"], "Return a dict with path, size, timestamps and file/directory flags"),
            _fn("get_file_name_list", ["dir_path"], "Return the names of the entries in a directory"),
            _fn("clear_directory", ["dir_path"], "Delete everything inside a directory but keep the directory"),
            _fn("execute_command", ["command"], "Run a shell command in the working directory and return its stdout"),
            _fn(
                "request_ai",
                ["system_description", "prompt"],
                "Ask the completion provider to handle a small text task (generate, translate, summarize, "
                "compute, analyse code). system_description sets the behaviour, prompt carries the task. "
                "Returns only the result text, with no explanation",
            ),
            _fn("execute_code", ["code"], "Run a block of Python code and return its result"),
            _value("httpx", "The httpx library, for HTTP requests"),
            _value("datetime", "The datetime module, for dates and times"),
            _value("shutil", "The shutil module, for high-level file operations"),
        ]

    def _resolve(self, path: str) -> Path:
        return Path.cwd() / Path(str(path)).expanduser()

    @property
    def _encoding(self) -> str:
        return self.context.settings.file_encoding

    async def create_file(self, file_path: str, content: str = "") -> bool:
        try:
            full_path = self._resolve(file_path)
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(str(content), encoding=self._encoding)
            return True
        except OSError as e:
            logger.warning(f"create_file failed for {file_path}: {e}")
            return False

    async def create_directory(self, dir_path: str) -> bool:
        try:
            self._resolve(dir_path).mkdir(parents=True, exist_ok=True)
            return True
        except OSError as e:
            logger.warning(f"create_directory failed for {dir_path}: {e}")
            return False

    async def modify_file(self, file_path: str, content: str = "") -> bool:
        full_path = self._resolve(file_path)
        if not full_path.exists():
            return False
        try:
            full_path.write_text(str(content), encoding=self._encoding)
            return True
        except OSError as e:
            logger.warning(f"modify_file failed for {file_path}: {e}")
            return False

    async def read_file(self, file_path: str) -> Optional[str]:
        full_path = self._resolve(file_path)
        if not full_path.exists():
            return None
        try:
            return full_path.read_text(encoding=self._encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"read_file failed for {file_path}: {e}")
            return None

    async def append_to_file(self, file_path: str, content: str = "") -> bool:
        full_path = self._resolve(file_path)
        if not full_path.exists():
            return False
        try:
            with full_path.open("a", encoding=self._encoding) as f:
                f.write(str(content))
            return True
        except OSError as e:
            logger.warning(f"append_to_file failed for {file_path}: {e}")
            return False

    def file_exists(self, file_path: str) -> bool:
        return self._resolve(file_path).exists()

    async def delete_file(self, file_path: str) -> bool:
        try:
            self._resolve(file_path).unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.warning(f"delete_file failed for {file_path}: {e}")
            return False

    async def delete_directory(self, dir_path: str) -> bool:
        full_path = self._resolve(dir_path)
        try:
            if full_path.exists():
                shutil.rmtree(full_path)
            return True
        except OSError as e:
            logger.warning(f"delete_directory failed for {dir_path}: {e}")
            return False

    async def rename(self, old_path: str, new_path: str) -> bool:
        source = self._resolve(old_path)
        try:
            if source.exists():
                source.rename(self._resolve(new_path))
            return True
        except OSError as e:
            logger.warning(f"rename failed for {old_path} -> {new_path}: {e}")
            return False

    async def move_file(self, source_path: str, destination_path: str) -> bool:
        source = self._resolve(source_path)
        destination = self._resolve(destination_path)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if source.exists():
                shutil.move(str(source), str(destination))
            return True
        except OSError as e:
            logger.warning(f"move_file failed for {source_path} -> {destination_path}: {e}")
            return False

    async def get_file_info(self, file_path: str) -> Optional[Dict[str, Any]]:
        full_path = self._resolve(file_path)
        try:
            stats = full_path.stat()
        except OSError:
            return None
        return {
            "path": str(full_path),
            "size": stats.st_size,
            "mtime": datetime.datetime.fromtimestamp(stats.st_mtime),
            "ctime": datetime.datetime.fromtimestamp(stats.st_ctime),
            "is_file": full_path.is_file(),
            "is_directory": full_path.is_dir(),
        }

    async def get_file_name_list(self, dir_path: str) -> List[str]:
        full_path = self._resolve(dir_path)
        if not full_path.is_dir():
            return []
        try:
            return sorted(entry.name for entry in full_path.iterdir())
        except OSError as e:
            logger.warning(f"get_file_name_list failed for {dir_path}: {e}")
            return []

    async def clear_directory(self, dir_path: str) -> bool:
        full_path = self._resolve(dir_path)
        if not full_path.is_dir():
            return False
        try:
            for entry in full_path.iterdir():
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            return True
        except OSError as e:
            logger.warning(f"clear_directory failed for {dir_path}: {e}")
            return False

    async def execute_command(self, command: str) -> str:
        console = self.context.console
        console.info(f"Executing system command: {command}")
        result = await self.context.command_runner.run(str(command))
        if not result.success:
            raise CommandFailedError(result.command, result.exit_code, detail=result.error or result.stderr.strip() or None)
        if result.stdout:
            console.plain(result.stdout.rstrip("\n"))
        console.success("System command executed successfully")
        return result.stdout

    async def request_ai(self, system_description: Any = "", prompt: str = "") -> str:
        # a single dict argument carries both fields
        if isinstance(system_description, dict):
            prompt = system_description.get("prompt") or prompt or ""
            system_description = system_description.get("system_description") or ""
        system = str(system_description).strip() or TEXT_PROCESSING_PROMPT
        messages = [ChatMessage(role="system", content=system), ChatMessage(role="user", content=str(prompt))]
        return await self.context.completion.complete(messages)

    async def execute_code(self, code: str) -> Any:
        return await self.context.code_executor.execute(str(code))
