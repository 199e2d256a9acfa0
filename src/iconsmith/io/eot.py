"""Embedded OpenType encoding.

Writes uncompressed EOT (version 0x00020001): a little-endian header
describing the font, taken from its OS/2, head and name tables,
followed by the unmodified TrueType data.
"""

import struct

from fontTools.ttLib import TTFont

from iconsmith.io.converter import load_ttf

EOT_VERSION = 0x00020001
EOT_MAGIC = 0x504C
DEFAULT_CHARSET = 1

# EOTSize, FontDataSize, Version, Flags
_PREFIX = struct.Struct("<4L")
# Charset, Italic, Weight, fsType, MagicNumber, UnicodeRange1-4, CodePageRange1-2,
# CheckSumAdjustment, Reserved1-4, Padding1
_FIXED = struct.Struct("<BBLHH4L2LL4LH")

# Name IDs written to the header, in header order: family, style, version, full name
_NAME_IDS = (1, 2, 5, 4)

PANOSE_FIELDS = (
    "bFamilyType",
    "bSerifStyle",
    "bWeight",
    "bProportion",
    "bContrast",
    "bStrokeVariation",
    "bArmStyle",
    "bLetterForm",
    "bMidline",
    "bXHeight",
)


def _name_bytes(font: TTFont, name_id: int) -> bytes:
    record = font["name"].getName(name_id, 3, 1, 0x409)
    if record is None:
        record = font["name"].getName(name_id, 1, 0, 0)
    if record is None:
        return b""
    return record.toUnicode().encode("utf-16-le")


def _panose(font: TTFont) -> bytes:
    panose = font["OS/2"].panose
    return bytes(getattr(panose, name, 0) for name in PANOSE_FIELDS)


def build_eot_header(font: TTFont, font_data_size: int) -> bytes:
    """Build the EOT header for a loaded TrueType font.

    Args:
        font: The loaded TrueType font
        font_data_size: Length of the TrueType data that follows the header

    Returns:
        Header bytes, with EOTSize accounting for the font data
    """
    os2 = font["OS/2"]
    head = font["head"]

    fixed = _FIXED.pack(
        DEFAULT_CHARSET,
        1 if os2.fsSelection & 0x01 else 0,
        os2.usWeightClass,
        os2.fsType,
        EOT_MAGIC,
        os2.ulUnicodeRange1,
        os2.ulUnicodeRange2,
        os2.ulUnicodeRange3,
        os2.ulUnicodeRange4,
        getattr(os2, "ulCodePageRange1", 0),
        getattr(os2, "ulCodePageRange2", 0),
        head.checkSumAdjustment,
        0,
        0,
        0,
        0,
        0,
    )

    names = b""
    for index, name_id in enumerate(_NAME_IDS):
        value = _name_bytes(font, name_id)
        if index:
            names += struct.pack("<H", 0)
        names += struct.pack("<H", len(value)) + value
    # Padding5 and an empty RootString
    names += struct.pack("<HH", 0, 0)

    body = _panose(font) + fixed + names
    eot_size = _PREFIX.size + len(body) + font_data_size
    return _PREFIX.pack(eot_size, font_data_size, EOT_VERSION, 0) + body


def ttf_to_eot_bytes(data: bytes) -> bytes:
    """Wrap TrueType bytes in an uncompressed EOT container."""
    font = load_ttf(data)
    try:
        header = build_eot_header(font, len(data))
    finally:
        font.close()
    return header + data


def read_eot_font_data(data: bytes) -> bytes:
    """Extract the embedded TrueType data from an uncompressed EOT.

    Raises:
        ValueError: If the data is not a well-formed uncompressed EOT
    """
    if len(data) < _PREFIX.size:
        raise ValueError("EOT data too short")
    eot_size, font_data_size, version, flags = _PREFIX.unpack_from(data)
    if eot_size != len(data):
        raise ValueError(f"EOTSize {eot_size} does not match data length {len(data)}")
    if flags & 0x4:
        raise ValueError("Compressed EOT data is not supported")
    magic = struct.unpack_from("<H", data, _PREFIX.size + 10 + 8)[0]
    if magic != EOT_MAGIC:
        raise ValueError(f"Bad EOT magic number 0x{magic:04X}")
    if version not in (0x00010000, 0x00020001, 0x00020002):
        raise ValueError(f"Unsupported EOT version 0x{version:08X}")
    return data[len(data) - font_data_size:]
