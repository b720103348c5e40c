"""
Batch operations.  Items are processed one after another, in input
order, each with the rules of the matching single item operation.  A
failing item is recorded and the batch goes on; nothing is raised for
an individual item, not even for an item that is not a usable path.
"""
from typing import Any
from typing import Callable
from typing import Dict
from typing import Iterable
from typing import List
from typing import Sequence
from typing import Tuple
from typing import Union

from davstorage.lib import error
from davstorage.lib import path as pathutil
from davstorage.lib.error import log
from davstorage.protocol.types import BatchItemResult
from davstorage.protocol.types import BatchResult

from .file_ops import FileOperations

Transfer = Tuple[str, str]


class BatchOperations:
    def __init__(self, file_ops: FileOperations) -> None:
        self.file_ops = file_ops

    def batch_delete(self, paths: Iterable[str]) -> BatchResult:
        return self._run(
            "delete",
            list(paths),
            lambda path: self.file_ops.remove_item(_item_path(path)),
            _path_fields,
        )

    def batch_copy(
        self,
        items: Iterable[Transfer],
        overwrite: bool = True,
        depth: Union[int, str] = "infinity",
    ) -> BatchResult:
        return self._run(
            "copy",
            list(items),
            lambda item: self.file_ops.copy_item(
                *_item_pair(item), overwrite=overwrite, depth=depth
            ),
            _transfer_fields,
        )

    def batch_move(
        self, items: Iterable[Transfer], overwrite: bool = True
    ) -> BatchResult:
        return self._run(
            "move",
            list(items),
            lambda item: self.file_ops.rename_item(*_item_pair(item), overwrite=overwrite),
            _transfer_fields,
        )

    def _run(
        self,
        action: str,
        items: Sequence,
        operation: Callable,
        fields: Callable,
    ) -> BatchResult:
        results: List[BatchItemResult] = []
        errors: List[BatchItemResult] = []

        for item in items:
            try:
                outcome = operation(item)
            except error.DAVError as e:
                log.debug("batch %s: %r failed: %s" % (action, item, e))
                errors.append(
                    BatchItemResult(
                        success=False, message=str(e), status=e.status, **fields(item)
                    )
                )
                continue
            except Exception as e:
                log.error(
                    "batch %s: unexpected failure for %r" % (action, item), exc_info=True
                )
                errors.append(
                    BatchItemResult(success=False, message=str(e), **fields(item))
                )
                continue
            results.append(
                BatchItemResult(success=True, message=outcome.message, **fields(item))
            )

        return BatchResult(
            results=results,
            errors=errors,
            total=len(items),
            message="batch %s finished: %i succeeded, %i failed"
            % (action, len(results), len(errors)),
        )


def _item_path(path: Any) -> str:
    if not isinstance(path, str) or not path:
        raise TypeError("not a path: %r" % (path,))
    return pathutil.normalize(path, False)


def _item_pair(item: Any) -> Transfer:
    if isinstance(item, (str, bytes)) or not isinstance(item, Sequence) or len(item) != 2:
        raise TypeError("expected a (source, target) pair, got %r" % (item,))
    return _item_path(item[0]), _item_path(item[1])


def _display(path: Any) -> str:
    if isinstance(path, str) and path:
        return pathutil.normalize(path, False)
    return repr(path)


def _path_fields(path: Any) -> Dict[str, str]:
    return {"path": _display(path)}


def _transfer_fields(item: Any) -> Dict[str, str]:
    if isinstance(item, (str, bytes)) or not isinstance(item, Sequence) or len(item) != 2:
        return {"source_path": repr(item)}
    return {"source_path": _display(item[0]), "target_path": _display(item[1])}
