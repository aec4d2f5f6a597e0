"""Downloads a client SDK from the server and swaps it in for the installed one."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from .bundle import Bundle, Message

log = logging.getLogger(__name__)

PathLike = Union[str, Path]

TOOL_OPTIONS = "ue4"
SCRIPTS_SUBPATH = Path("Source") / "KBEnginePlugins" / "Scripts"


@dataclass(frozen=True)
class SDKChunk:
    """One piece of a file sent by the server while importing the SDK."""

    file_name: str
    file_size: int
    remaining_files: int
    file_datas: bytes


def delete_directory(path: PathLike) -> bool:
    """Remove a directory tree; True if it is gone afterwards."""
    target = Path(path)
    if not target.is_dir():
        return True
    try:
        shutil.rmtree(target)
    except OSError as exc:
        log.warning("could not delete directory %s: %s", target, exc)
        return False
    return True


def create_directory(path: PathLike) -> bool:
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        log.warning("could not create directory %s: %s", path, exc)
        return False
    return True


def copy_directory(src: PathLike, dst: PathLike) -> bool:
    """Copy a tree into `dst`, overwriting files that exist there."""
    source = Path(src)
    if not source.is_dir():
        return False
    shutil.copytree(source, Path(dst), dirs_exist_ok=True)
    return True


def _find_files(directory: PathLike) -> list[Path]:
    root = Path(directory)
    if not root.is_dir():
        return []
    return sorted(path for path in root.rglob("*") if path.is_file())


def move_directory(src: PathLike, dst: PathLike) -> None:
    """Replace `dst` with the files of `src`, moving them."""
    source, target = Path(src), Path(dst)
    delete_directory(target)
    for file in _find_files(source):
        destination = target / file.relative_to(source)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(file), str(destination))


class ClientSDKUpdater:
    """Collects SDK files sent by the server and installs them."""

    def __init__(
        self,
        sdk_path: PathLike,
        server_address: tuple[str, int] = ("", 0),
        on_success: Optional[Callable[[], None]] = None,
    ) -> None:
        self.sdk_path = Path(sdk_path)
        self.sdk_temp_path = Path(f"{self.sdk_path}_temp")
        self.sdk_bak_path = Path(f"{self.sdk_path}_bak")
        self.server_address = server_address
        self.on_success = on_success
        self.warn_update_sdk = ""
        self.download_files = 0
        self._file_buffer: Optional[bytearray] = None

    def warn_message(self) -> str:
        ip, port = self.server_address
        self.warn_update_sdk = (
            "Version does not match the server.\nClick to update KBEnginePlugin!"
            f"\nPull from: {ip}:{port}"
        )
        return self.warn_update_sdk

    def on_import_client_sdk(self, chunk: SDKChunk) -> None:
        """Take one chunk; write the file when complete, install after the last."""
        if self._file_buffer is None:
            self._file_buffer = bytearray()
        self._file_buffer += chunk.file_datas

        total = self.download_files + chunk.remaining_files
        percent = int(self.download_files / total * 100) if total else 0
        self.warn_update_sdk = (
            f"Download:{chunk.file_name} -> {len(self._file_buffer)}/"
            f"{chunk.file_size}bytes! {percent}%"
        )

        if len(self._file_buffer) != chunk.file_size:
            return

        target = self.sdk_temp_path / chunk.file_name
        log.warning("download SDK file %s", target)
        create_directory(target.parent)
        data = bytes(self._file_buffer)
        if target.name.endswith(".png"):
            target.write_bytes(data)
        else:
            text = data.split(b"\0", 1)[0].decode("utf-8", errors="replace")
            with target.open("w", encoding="utf-8", newline="") as handle:
                handle.write(text)

        self._file_buffer = None
        self.download_files += 1

        if chunk.remaining_files == 0:
            self.warn_update_sdk = ""
            self.download_files = 0
            self.replace_new_sdk()
            log.warning("end update KBEnginePlugin")
            if self.on_success is not None:
                self.on_success()

    def download_request(
        self, bundle: Bundle, message: Message, recv_buffer_max: int
    ) -> bool:
        """Prepare the temp directory and write the import request into `bundle`."""
        log.warning("%s", self.warn_message())
        self.download_files = 0
        if not delete_directory(self.sdk_temp_path):
            return False
        create_directory(self.sdk_temp_path)
        self._file_buffer = None

        bundle.new_message(message)
        bundle.write_string(TOOL_OPTIONS)
        bundle.write_int32(recv_buffer_max)
        bundle.write_string("")  # callback ip
        bundle.write_uint16(0)  # callback port
        return True

    def replace_new_sdk(self) -> None:
        """Install the downloaded SDK, keeping the installed Scripts directory."""
        copy_directory(self.sdk_path, self.sdk_bak_path)
        copy_directory(
            self.sdk_bak_path / SCRIPTS_SUBPATH, self.sdk_temp_path / SCRIPTS_SUBPATH
        )
        copy_directory(self.sdk_temp_path, self.sdk_path)
        delete_directory(self.sdk_bak_path)
        delete_directory(self.sdk_temp_path)
        log.warning("update SDK successfully")

    def find_files(self, directory: PathLike) -> list[Path]:
        """Every file below `directory`, sorted."""
        return _find_files(directory)