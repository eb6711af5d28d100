"""
ZPL command stream tokenizer.
"""

# Standard Library
import dataclasses
import re


CONTROL_CHARACTERS = "^~"
START_COMMAND = "^XA"
END_COMMAND = "^XZ"
FONT_COMMAND = "^A"

# [^~^]* cannot overlap the next token, so matching stays linear
TOKEN_PATTERN = re.compile(r"([~^][A-Z][A-Z0-9@])([^~^]*)")


@dataclasses.dataclass(frozen=True)
class Token:
	command: str
	params: str


#============================================
def normalize_input(text: str) -> str:
	"""
	Trim a command stream and normalize line endings.

	Args:
		text: Raw ZPL text.

	Returns:
		Normalized text.
	"""
	return text.strip().replace("\r\n", "\n")


#============================================
def canonical_token(command: str, params: str) -> Token:
	"""
	Fold inline font letters into the ^A command.

	"^A0N,30" is font "0" with params "N,30"; the dispatch key is always
	"^A" so the letter moves into the params. "^A@" keeps its own key.

	Args:
		command: Three character command text.
		params: Parameter text after the command.

	Returns:
		Token with the canonical command.
	"""
	if command.startswith(FONT_COMMAND) and not command.endswith("@"):
		return Token(FONT_COMMAND, (command[2:] + params).strip())
	return Token(command, params.strip())


#============================================
def tokenize(body: str) -> list[Token]:
	"""
	Split a command stream body into tokens.

	Args:
		body: ZPL text without the ^XA/^XZ markers.

	Returns:
		Tokens in source order. Text that does not start a token is skipped.
	"""
	tokens: list[Token] = []
	for match in TOKEN_PATTERN.finditer(body):
		tokens.append(canonical_token(match.group(1), match.group(2)))
	return tokens
