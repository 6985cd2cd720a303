"""
File System Manager component handling the destination file
"""
import sys
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from .errors import DestinationCreateFailed


class FileSystemManager:
    def __init__(self, base_dir: Union[str, Path] = ".",
                 prompt_input: Optional[TextIO] = None,
                 prompt_output: Optional[TextIO] = None):
        """
        Initialize the File System Manager

        Args:
            base_dir: Directory downloads are saved to (the working directory by default)
            prompt_input: Where overwrite answers are read from (defaults to sys.stdin)
            prompt_output: Where the overwrite prompt is written (defaults to sys.stderr)
        """
        self.base_dir = Path(base_dir)
        self.prompt_input = prompt_input if prompt_input is not None else sys.stdin
        self.prompt_output = prompt_output if prompt_output is not None else sys.stderr

    def destination_path(self, file_name: str) -> Path:
        return self.base_dir / file_name

    def exists(self, file_name: str) -> bool:
        """Check if file_name already exists in the download directory"""
        return self.destination_path(file_name).exists()

    def confirm_overwrite(self, file_name: str) -> bool:
        """
        Ask whether an existing file may be overwritten

        Only the first character of each answer line counts; the rest of the
        line is discarded. Anything other than Y/N asks again.

        Args:
            file_name (str): File that already exists

        Returns:
            bool: True for Y/y, False for N/n or end of input
        """
        self._say(f"File [{file_name}] exists in current directory. Overwrite? (Y/N): ")
        while True:
            line = self.prompt_input.readline()
            if line == "":
                return False
            answer = line[:1]
            if answer in ("Y", "y"):
                return True
            if answer in ("N", "n"):
                return False
            self._say("Please enter Y or N: ")

    def create_destination(self, file_name: str) -> BinaryIO:
        """
        Create (or truncate) the destination file for writing

        Raises:
            DestinationCreateFailed: If the file cannot be opened
        """
        path = self.destination_path(file_name)
        try:
            return open(path, "wb")
        except OSError as e:
            raise DestinationCreateFailed.from_os_error(
                f"Cannot create destination file '{file_name}'.", e, "open"
            )

    def _say(self, text: str) -> None:
        self.prompt_output.write(text)
        self.prompt_output.flush()
