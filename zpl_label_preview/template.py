"""
Label templates: `label Name(param: type) { ...zpl... }` source text.
"""

# Standard Library
import logging
import re
from typing import Sequence

# local repo modules
import zpl_label_preview as zlp
import zpl_label_preview.config
import zpl_label_preview.document
import zpl_label_preview.parser


logger = logging.getLogger(__name__)

DEFAULT_MAX_TEMPLATE_LENGTH = zlp.config.DEFAULT_MAX_TEMPLATE_LENGTH
DEFAULT_LABEL_NAME = "Label"
VARIABLE_TYPES = zlp.document.VARIABLE_TYPES

FULL_PATTERN = re.compile(
	r"^label\s+(?P<name>[a-zA-Z0-9\-_]+)\((?P<params>.*)\)\s*\{(?P<zpl>.*)}$"
)
SHORT_PATTERN = re.compile(r"^label\s+(?P<name>[a-zA-Z0-9\-_]+)?\s*\{(?P<zpl>.*)}$")
WHITESPACE_PATTERN = re.compile(r"\s+")


#============================================
def join_template(strings: Sequence[str], values: Sequence[object]) -> str:
	"""
	Interleave literal parts with values and normalize whitespace.

	Args:
		strings: Literal parts.
		values: Values placed after each literal part; None renders empty.

	Returns:
		Single line template text.
	"""
	pieces: list[str] = []
	for index, part in enumerate(strings):
		pieces.append(part)
		if index < len(values) and values[index] is not None:
			pieces.append(str(values[index]))
	text = "".join(pieces).replace("\n", " ")
	return WHITESPACE_PATTERN.sub(" ", text).strip()


#============================================
def parse_variable_declarations(params: str) -> dict[str, zlp.document.Variable]:
	"""
	Parse `name: type, ...` declarations.

	Args:
		params: Text between the parentheses.

	Returns:
		Variables by name, in declaration order, with empty values.
	"""
	variables: dict[str, zlp.document.Variable] = {}
	for declaration in params.split(","):
		if not declaration:
			continue
		key, _, type_name = declaration.partition(":")
		name = key.strip()
		var_type = type_name.strip()
		if var_type not in VARIABLE_TYPES:
			var_type = "string"
		variables[name] = zlp.document.Variable(name=name, type=var_type, value="")
	return variables


#============================================
def zpl(
	strings: str | Sequence[str],
	*values: object,
	max_length: int = DEFAULT_MAX_TEMPLATE_LENGTH,
) -> zlp.parser.ZplParser:
	"""
	Build a parser from label template text.

	Args:
		strings: Template text, or literal parts to interleave with values.
		*values: Values placed between the literal parts.
		max_length: Longest accepted template; longer input is truncated.

	Returns:
		ZplParser ready for parse().
	"""
	if max_length <= 0:
		raise ValueError("max_length must be a positive number.")
	if isinstance(strings, str):
		strings = (strings,)

	text = join_template(strings, values)
	if len(text) > max_length:
		logger.warning("ZPL string will be truncated to %d characters.", max_length)
		text = text[:max_length]

	match = FULL_PATTERN.match(text)
	if match is not None:
		variables = parse_variable_declarations(match.group("params"))
		return zlp.parser.ZplParser(match.group("zpl"), name=match.group("name"), variables=variables)

	match = SHORT_PATTERN.match(text)
	if match is not None:
		name = match.group("name") or DEFAULT_LABEL_NAME
		return zlp.parser.ZplParser(match.group("zpl"), name=name)

	return zlp.parser.ZplParser(text)
