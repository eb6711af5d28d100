"""
Printer character encoding emulation.

Label printers receive bytes, not text. A field's text is sent as UTF-8 and
the printer looks every byte up in its Code Page 850 based font table, so
anything outside ASCII prints as one glyph per UTF-8 byte. These helpers
reproduce that lookup for the preview.
"""

# Standard Library
import re


HEX_ESCAPE_PATTERN = re.compile(r"_([0-9a-fA-F]{2})")

# printer substitutions for the control range
CONTROL_GLYPHS = {
	26: "0",
	27: "⅓",
	28: "⅔",
	29: "Ĳ",
	30: "ĳ",
	31: "\\",
}

# bytes where the printer font differs from Code Page 850
EXTENDED_OVERRIDES = {
	213: "i",
	240: "-",
	241: "Ð",
	242: "±",
	255: " ",
}


class ZplEncodeError(ValueError):
	"""
	Raised when a byte has no glyph in the printer code page.
	"""


#============================================
def build_code_page() -> dict[int, str]:
	"""
	Build the byte to glyph table used by the printer font.

	Returns:
		Mapping of byte value (0-255) to glyph string.
	"""
	table: dict[int, str] = {}
	for byte in range(32):
		table[byte] = CONTROL_GLYPHS.get(byte, "")
	for byte in range(32, 127):
		table[byte] = chr(byte)
	table[127] = "⌂"
	extended = bytes(range(128, 256)).decode("cp850")
	for offset, glyph in enumerate(extended):
		table[128 + offset] = glyph
	table.update(EXTENDED_OVERRIDES)
	return table


CODE_PAGE = build_code_page()


#============================================
def decode_byte(byte: int) -> str:
	"""
	Look up a single byte in the code page.

	Args:
		byte: Byte value.

	Returns:
		Glyph string, possibly empty for control bytes.
	"""
	if byte not in CODE_PAGE:
		raise ZplEncodeError(
			f"Byte value {byte} (0x{byte:02X}) has no corresponding CodePage 850 mapping"
		)
	return CODE_PAGE[byte]


#============================================
def decode_bytes(data: bytes) -> str:
	return "".join(decode_byte(byte) for byte in data)


#============================================
def encode(text: str, hex_mode: bool = False) -> str:
	"""
	Emulate how the printer renders a field's text.

	Args:
		text: Field data as written in the label source.
		hex_mode: Whether "_XX" escapes (set by ^FH) are decoded as raw bytes.

	Returns:
		Text as the printer font would show it, one glyph per byte.
	"""
	if not hex_mode:
		return decode_bytes(text.encode("utf-8"))

	pieces: list[str] = []
	last_index = 0
	for match in HEX_ESCAPE_PATTERN.finditer(text):
		literal = text[last_index:match.start()]
		pieces.append(decode_bytes(literal.encode("utf-8")))
		pieces.append(decode_byte(int(match.group(1), 16)))
		last_index = match.end()
	pieces.append(decode_bytes(text[last_index:].encode("utf-8")))
	return "".join(pieces)


#============================================
def raw_encode(text: str) -> str:
	"""
	Map each UTF-8 byte straight to the character with that code point.

	Args:
		text: Input text.

	Returns:
		String with one character per UTF-8 byte, no code page applied.
	"""
	return "".join(chr(byte) for byte in text.encode("utf-8"))


#============================================
def character_codes(text: str) -> list[int]:
	"""
	List the byte values the printer receives for a text.

	Args:
		text: Input text.

	Returns:
		Code points of raw_encode(text).
	"""
	return [ord(char) for char in raw_encode(text)]
