"""
Part planning and byte-range reading for multipart uploads.
"""

from dataclasses import dataclass
from pathlib import Path

from ..client import ValidationError

MIB = 1024 * 1024
DEFAULT_PART_SIZE_BYTES = 10 * MIB


@dataclass(frozen=True)
class PartRange:
    """Byte range of one part within the source file."""

    part_number: int
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def count_parts(file_size: int, part_size: int) -> int:
    """Number of parts needed: ceil(file_size / part_size)."""
    if part_size <= 0:
        raise ValidationError(f"Part size must be positive, got {part_size}")
    if file_size <= 0:
        return 0
    return (file_size + part_size - 1) // part_size


def plan_parts(file_size: int, part_size: int) -> list[PartRange]:
    """
    Split a file into contiguous 1-based parts.

    Every part except the last is exactly ``part_size`` bytes; the last holds
    the remainder. The lengths always sum to ``file_size``.

    Raises:
        ValidationError: If the file is empty or the part count is not positive
    """
    total_parts = count_parts(file_size, part_size)
    if total_parts <= 0:
        raise ValidationError(f"Cannot split {file_size} bytes into parts")

    parts = []
    for index in range(total_parts):
        offset = index * part_size
        parts.append(
            PartRange(
                part_number=index + 1,
                offset=offset,
                length=min(part_size, file_size - offset),
            )
        )
    return parts


@dataclass(frozen=True)
class FilePartSource:
    """Reads one planned byte range of a file on demand."""

    path: Path
    part: PartRange

    @property
    def part_number(self) -> int:
        return self.part.part_number

    def read(self) -> bytes:
        """
        Read exactly this part's bytes.

        Raises:
            ValidationError: If the file is shorter than planned (changed mid-upload)
        """
        with open(self.path, "rb") as f:
            f.seek(self.part.offset)
            data = f.read(self.part.length)
        if len(data) != self.part.length:
            raise ValidationError(
                f"Short read from {self.path}: expected {self.part.length} bytes "
                f"at offset {self.part.offset}, got {len(data)}",
                part_number=self.part.part_number,
            )
        return data
