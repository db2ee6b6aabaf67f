import logging
import shutil
from typing import Any, Iterator, Sequence

from eth_utils import decode_hex
from rich.table import Table

from nethermind.unbundle.exceptions import SchemaSourceError
from nethermind.unbundle.utils import pprint_list

from .function_decoders import FunctionDescriptor
from .utils import abi_to_signature, filter_functions

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("decoding")


class SchemaTable:
    """

    Mapping from 4 byte selectors to function descriptors, merged from one or more ABIs.  Selectors are unique:
    the first ABI to register a selector keeps it, and later functions sharing the selector are skipped.  Collisions
    are logged at debug level, but are not reported to callers.

    """

    loaded_abis: list[str]
    """ Names of the ABIs merged into the table, in merge order """

    function_decoders: dict[bytes, FunctionDescriptor]
    """ Dictionary mapping function selectors to the first registered descriptor """

    def __init__(self):
        self.loaded_abis = []
        self.function_decoders = {}

    def __len__(self) -> int:
        return len(self.function_decoders)

    def __contains__(self, selector: bytes) -> bool:
        return selector in self.function_decoders

    def __iter__(self) -> Iterator[FunctionDescriptor]:
        return iter(self.function_decoders.values())

    def get(self, selector: bytes) -> FunctionDescriptor | None:
        """Returns the descriptor registered for a selector"""
        return self.function_decoders.get(selector)

    def copy(self) -> "SchemaTable":
        """Returns a shallow copy.  Descriptors are immutable, so they are shared between copies"""
        table = SchemaTable()
        table.loaded_abis = list(self.loaded_abis)
        table.function_decoders = dict(self.function_decoders)
        return table

    def function_names(self) -> set[str]:
        """Returns the set of function names in the table"""
        return {func.name for func in self.function_decoders.values()}

    def add_abi(
        self,
        abi_name: str,
        abi_data: Sequence[dict[str, Any]],
        method_identifiers: dict[str, str] | None = None,
    ) -> int:
        """
        Adds the functions of an ABI to the table.  Non-function items are ignored.

        If ``method_identifiers`` (canonical signature -> selector hex) contains the signature of a function, that
        selector takes precedence over the computed one.  Compilers emit these identifiers, and they stay correct
        when declared parameter names or types in the ABI disagree with the compiled signature.

        :param abi_name: Name of ABI
        :param abi_data: List of ABI items
        :param method_identifiers: Optional mapping of canonical signatures to selector hex strings
        :return: Number of functions added
        :raises SchemaSourceError: if an ABI item or method identifier is malformed.  Nothing is added to the table
        """
        method_identifiers = method_identifiers or {}
        functions = []
        try:
            for abi_function in filter_functions(abi_data):
                explicit_id = method_identifiers.get(abi_to_signature(abi_function))
                selector = decode_hex(explicit_id) if explicit_id else None
                if selector is not None and len(selector) != 4:
                    raise ValueError(f"Method identifier {explicit_id} is not a 4 byte selector")
                functions.append(FunctionDescriptor.from_abi(abi_function, abi_name, selector))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise SchemaSourceError(f"Malformed ABI {abi_name}: {e!r}") from e

        added = self.add_function_decoders(functions)
        if abi_name not in self.loaded_abis:
            self.loaded_abis.append(abi_name)

        return added

    def add_function_decoders(self, functions: Sequence[FunctionDescriptor]) -> int:
        """
        Adds function descriptors to the table.  If a selector is already present, the existing descriptor is
        kept.

        :param functions:
        :return: Number of descriptors added
        """
        added = 0
        for func in functions:
            existing_decoder = self.function_decoders.get(func.selector)
            if existing_decoder is not None:
                logger.debug(
                    f"Function {func.function_signature} from {func.abi_name} with selector {func.selector_hex} "
                    f"already defined by {existing_decoder.function_signature} in {existing_decoder.abi_name}"
                )
                continue

            self.function_decoders[func.selector] = func
            added += 1

        return added

    def _group_abis(self) -> dict[str, list[FunctionDescriptor]]:
        output_dict: dict[str, list[FunctionDescriptor]] = {name: [] for name in self.loaded_abis}

        for func in self.function_decoders.values():
            output_dict.setdefault(func.abi_name, []).append(func)

        return output_dict

    def decoder_table(self, full_signatures: bool = False, title: str = "Decoder ABIs") -> Table:
        """
        Returns a rich table with all the ABIs in the table and the functions each one decodes.
        Used for printing out abi information in the CLI

        :param full_signatures:
        :param title:
        :return:
        """
        term_width = shutil.get_terminal_size().columns
        abi_table = Table(title=f"[bold magenta]{title}", min_width=80, show_lines=True)

        abi_table.add_column("Name")
        abi_table.add_column("Count")
        abi_table.add_column("Functions")

        for abi_name, funcs in self._group_abis().items():
            abi_table.add_row(
                abi_name,
                str(len(funcs)),
                "\n".join(pprint_list(sorted(f.id_str(full_signatures) for f in funcs), int(term_width * 0.7))),
            )

        return abi_table
