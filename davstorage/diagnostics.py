"""
Connection diagnostics for a WebDAV storage configuration.

``run_diagnostics`` checks a configuration in four stages, and every
stage is attempted even when an earlier one failed:

connect
    OPTIONS on the server root.  401 counts as success, the server is there.
auth
    PROPFIND depth 0 on the default folder.
read
    PROPFIND depth 1 on the default folder; reports the number of entries.
write
    PUT of a small probe file into the default folder, followed by a
    DELETE of it.

A probe file left behind by a failed cleanup is logged and reported
through ``DiagnosticReport.orphaned_probe``; it is not retried.
"""
import logging
import time
from typing import Callable
from typing import Optional

from davstorage.config import DriverConfig
from davstorage.davclient import DAVClient
from davstorage.davclient import DAVResponse
from davstorage.lib import error
from davstorage.lib import path as pathutil
from davstorage.protocol.types import DiagnosticOutcome
from davstorage.protocol.types import DiagnosticReport
from davstorage.protocol.types import StageResult
from davstorage.protocol.xml_builders import build_propfind_body
from davstorage.protocol.xml_parsers import count_responses

log = logging.getLogger(__name__)

PROBE_PREFIX = "__davstorage_probe_"

_messages = {
    DiagnosticOutcome.FULL_SUCCESS: "connection, authentication, read and write access are working",
    DiagnosticOutcome.PARTIAL_WRITE_UNAVAILABLE: "connection, authentication and read access are working, write access is not",
    DiagnosticOutcome.PARTIAL_READ_UNAVAILABLE: "connection and authentication are working, read access is not",
    DiagnosticOutcome.AUTH_FAILURE: "the server is reachable, but authentication failed",
    DiagnosticOutcome.CONNECT_FAILURE: "the WebDAV server could not be reached",
}


def probe_payload(probe_id: int) -> bytes:
    return ("davstorage connection probe\nprobe id: %i\n" % probe_id).encode("utf-8")


def run_diagnostics(
    config: DriverConfig, client: Optional[DAVClient] = None
) -> DiagnosticReport:
    """
    Run all four stages against the server of ``config``.  Never raises
    for server or network trouble; everything ends up in the report.

    Args:
        config: the configuration to check
        client: reuse this client instead of building a new one
    """
    own_client = client is None
    if own_client:
        client = DAVClient(
            config.credentials,
            ssl_verify_cert=config.ssl_verify_cert,
            headers=config.headers,
        )
    folder = pathutil.normalize(config.default_folder, True)

    try:
        report = DiagnosticReport(
            connect=_connect_stage(client, config),
            auth=_auth_stage(client, config, folder),
            read=_read_stage(client, config, folder),
            write=_write_stage(client, config, folder),
            connection_info=config.connection_info(),
        )
    finally:
        if own_client:
            client.close()

    report.outcome = summarize(report)
    report.message = _messages[report.outcome]
    log.debug("diagnostics for %s: %s" % (config.name, report.outcome.value))
    return report


def summarize(report: DiagnosticReport) -> DiagnosticOutcome:
    if not report.connect.success:
        return DiagnosticOutcome.CONNECT_FAILURE
    if not report.auth.success:
        return DiagnosticOutcome.AUTH_FAILURE
    if not report.read.success:
        return DiagnosticOutcome.PARTIAL_READ_UNAVAILABLE
    if not report.write.success:
        return DiagnosticOutcome.PARTIAL_WRITE_UNAVAILABLE
    return DiagnosticOutcome.FULL_SUCCESS


def _timed(stage: StageResult, request: Callable[[], DAVResponse]) -> Optional[DAVResponse]:
    """
    Send the stage request, recording latency and transport failures on
    the stage.  Returns None if no response was received.
    """
    started = time.monotonic()
    try:
        response = request()
    except error.TransportError as e:
        stage.success = False
        stage.error = e.reason
        stage.timed_out = e.timed_out
        if e.timed_out:
            stage.note = "request timed out, check the server address and the network"
        return None
    finally:
        stage.latency_ms = int((time.monotonic() - started) * 1000)
    stage.status_code = response.status
    return response


def _connect_stage(client: DAVClient, config: DriverConfig) -> StageResult:
    stage = StageResult(name="connect")
    response = _timed(
        stage, lambda: client.options("/", timeout=config.connection_timeout)
    )
    if response is None:
        return stage
    ## 401 means the server is there, the credentials are the next stage's business
    if response.ok or response.status == 401:
        stage.success = True
        stage.note = "server reachable"
    else:
        stage.error = error.errmsg(response)
    return stage


def _auth_stage(client: DAVClient, config: DriverConfig, folder: str) -> StageResult:
    stage = StageResult(name="auth")
    response = _timed(
        stage,
        lambda: client.propfind(
            pathutil.encode(folder),
            depth=0,
            body=build_propfind_body(["resourcetype"]),
            timeout=config.connection_timeout,
        ),
    )
    if response is None:
        return stage
    if response.ok:
        stage.success = True
        stage.note = "authenticated"
    elif response.status == 401:
        stage.error = "authentication failed, check username and password"
    else:
        stage.error = error.errmsg(response)
    return stage


def _read_stage(client: DAVClient, config: DriverConfig, folder: str) -> StageResult:
    stage = StageResult(name="read")
    response = _timed(
        stage,
        lambda: client.propfind(
            pathutil.encode(folder),
            depth=1,
            body=build_propfind_body(
                ["resourcetype", "getcontentlength", "getlastmodified"]
            ),
            timeout=config.read_timeout,
        ),
    )
    if response is None:
        return stage
    if not response.ok:
        stage.error = error.errmsg(response)
        return stage

    stage.success = True
    stage.note = "folder listed"
    responses = count_responses(response.content, huge_tree=config.huge_tree)
    if responses is None:
        stage.note += ", but the listing could not be parsed"
    else:
        ## the folder itself is part of the answer
        stage.file_count = max(0, responses - 1)
    return stage


def _write_stage(client: DAVClient, config: DriverConfig, folder: str) -> StageResult:
    stage = StageResult(name="write")
    probe_id = int(time.time() * 1000)
    probe_path = pathutil.join(folder, "%s%i.txt" % (PROBE_PREFIX, probe_id))
    payload = probe_payload(probe_id)

    response = _timed(
        stage,
        lambda: client.put(
            pathutil.encode(probe_path),
            payload,
            {"Content-Type": "text/plain; charset=utf-8", "Content-Length": str(len(payload))},
            timeout=config.read_timeout,
        ),
    )
    if response is None:
        return stage
    if not response.ok:
        stage.error = error.errmsg(response)
        return stage

    stage.success = True
    stage.note = "probe file written"
    stage.test_file = probe_path

    try:
        cleanup = client.delete(
            pathutil.encode(probe_path), timeout=config.connection_timeout
        )
    except error.TransportError as e:
        stage.cleaned = False
        stage.cleanup_error = e.reason
    else:
        stage.cleaned = cleanup.ok
        if not cleanup.ok:
            stage.cleanup_error = error.errmsg(cleanup)

    if not stage.cleaned:
        log.warning(
            "probe file %s on %s could not be removed (%s), it has to be deleted by hand"
            % (probe_path, config.name, stage.cleanup_error)
        )
    return stage
