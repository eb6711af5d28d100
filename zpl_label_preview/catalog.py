"""
ZPL command reference catalog.

The catalog is static data shipped next to this module (commands.json). The
parser only asks whether a command exists; the remaining fields describe the
command for tooling such as the CLI's --commands listing.
"""

# Standard Library
import dataclasses
import functools
import json
import pathlib


CATALOG_PATH = pathlib.Path(__file__).resolve().parent / "commands.json"

FULLY_IMPLEMENTED = "FULLY_IMPLEMENTED"
PARTIALLY_IMPLEMENTED = "PARTIALLY_IMPLEMENTED"
NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
NOT_APPLICABLE = "NOT_APPLICABLE"


@dataclasses.dataclass(frozen=True)
class CommandInfo:
	command: str
	display_name: str
	implementation_status: str
	description: str
	param_format: str
	doc_reference: dict[str, int]


#============================================
@functools.lru_cache(maxsize=1)
def load_catalog() -> dict:
	"""
	Load the catalog data file.

	Returns:
		Parsed JSON with "references", "messages" and "commands" keys.
	"""
	with CATALOG_PATH.open("r", encoding="utf-8") as handle:
		return json.load(handle)


#============================================
def has(command: str) -> bool:
	"""
	Check whether a command token is a known ZPL command.

	Args:
		command: Token including its prefix, e.g. "^FO".

	Returns:
		True when the catalog lists the command.
	"""
	return command in load_catalog()["commands"]


#============================================
def metadata(command: str) -> CommandInfo:
	"""
	Look up the reference entry of a command.

	Args:
		command: Token including its prefix.

	Returns:
		CommandInfo for the command.
	"""
	entry = load_catalog()["commands"].get(command)
	if entry is None:
		raise KeyError(f"Unknown ZPL command: {command}")
	return CommandInfo(
		command=command,
		display_name=entry["name"],
		implementation_status=entry["implemented"],
		description=entry["description"],
		param_format=entry["format"],
		doc_reference=dict(entry["reference"]),
	)


#============================================
def implementation_message(command: str) -> str:
	"""
	Human readable implementation status of a command.

	Args:
		command: Token including its prefix.

	Returns:
		Status sentence.
	"""
	status = metadata(command).implementation_status
	return load_catalog()["messages"][status]


#============================================
def reference_url(manual: str) -> str | None:
	reference = load_catalog()["references"].get(manual)
	if reference is None:
		return None
	return reference["url"]


#============================================
def list_commands() -> list[str]:
	"""
	List every cataloged command token.

	Returns:
		Sorted command tokens.
	"""
	return sorted(load_catalog()["commands"])
