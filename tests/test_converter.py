from __future__ import annotations

import json
import logging

import pytest
from opentelemetry.proto.trace.v1.trace_pb2 import Span
from pydantic import ValidationError

from appinsights_otlp.converter import TelemetryBatchConverter, convert_document
from appinsights_otlp.errors import (
    FieldTypeError,
    MalformedDocumentError,
    MalformedIdentifierError,
    MalformedTimestampError,
    MissingFieldError,
)
from appinsights_otlp.mapping.orchestrator import parse_sdk_version

TRACE_HEX = "11112222333344445555666677778888"
SPAN_HEX = "aaaabbbbccccdddd"
NEW_YEAR_2023_NS = 1_672_531_200 * 1_000_000_000


def _request_record(**overrides):
    record = {
        "operationId": TRACE_HEX,
        "id": SPAN_HEX,
        "type": "Requests",
        "time": "2023-01-01T00:00:00Z",
        "durationMs": 150.0,
        "name": "GET /api",
    }
    record.update(overrides)
    return record


def _spans(request):
    return [
        span
        for resource_spans in request.resource_spans
        for scope_spans in resource_spans.scope_spans
        for span in scope_spans.spans
    ]


def _pairs(attributes):
    return [(kv.key, kv.value.string_value) for kv in attributes]


def test_single_request_record():
    request = convert_document({"records": [_request_record()]})
    spans = _spans(request)
    assert len(spans) == 1
    span = spans[0]
    assert span.kind == Span.SPAN_KIND_SERVER
    assert span.name == "GET /api"
    assert span.trace_id == bytes.fromhex(TRACE_HEX)
    assert len(span.trace_id) == 16
    assert span.span_id == bytes.fromhex(SPAN_HEX)
    assert len(span.span_id) == 8
    assert span.parent_span_id == b""
    assert span.start_time_unix_nano == NEW_YEAR_2023_NS
    assert span.end_time_unix_nano - span.start_time_unix_nano == 150_000_000


def test_json_text_and_bytes_input():
    doc = json.dumps({"records": [_request_record()]})
    assert _spans(convert_document(doc))[0].name == "GET /api"
    assert _spans(convert_document(doc.encode("utf-8")))[0].name == "GET /api"


def test_parent_equal_to_operation_id_is_root():
    request = convert_document({"records": [_request_record(parentId=TRACE_HEX)]})
    assert _spans(request)[0].parent_span_id == b""


def test_parent_span_id_decoded():
    request = convert_document({"records": [_request_record(parentId="0102030405060708")]})
    assert _spans(request)[0].parent_span_id == bytes(range(1, 9))


def test_operation_name_preferred_over_name_for_requests():
    request = convert_document(
        {"records": [_request_record(operationName="GET Orders/Index", name="GET /orders")]}
    )
    assert _spans(request)[0].name == "GET Orders/Index"


def test_requests_kind_ignores_dependency_type():
    request = convert_document(
        {"records": [_request_record(dependencyType="Queue Message | Azure Service Bus")]}
    )
    assert _spans(request)[0].kind == Span.SPAN_KIND_SERVER


def test_unknown_telemetry_type_is_server_and_uses_name():
    request = convert_document({"records": [_request_record(type="PageViews", name="Home")]})
    span = _spans(request)[0]
    assert span.kind == Span.SPAN_KIND_SERVER
    assert span.name == "Home"


def test_http_dependency_record():
    record = _request_record(
        type="Dependencies",
        dependencyType="HTTP",
        name="GET /api/orders",
        data="https://orders/api/orders",
        resultCode="200",
        parentId="0102030405060708",
    )
    span = _spans(convert_document({"records": [record]}))[0]
    assert span.kind == Span.SPAN_KIND_CLIENT
    assert span.name == "HTTP GET"
    assert _pairs(span.attributes) == [
        ("http.method", "GET"),
        ("http.target", "/api/orders"),
        ("http.url", "https://orders/api/orders"),
        ("http.status_code", "200"),
        ("applicationinsights.dependency_type", "HTTP"),
    ]


def test_messaging_dependency_is_producer():
    record = _request_record(
        type="Dependencies", dependencyType="Queue Message | Azure Service Bus", name="Send"
    )
    span = _spans(convert_document({"records": [record]}))[0]
    assert span.kind == Span.SPAN_KIND_PRODUCER
    assert span.name == "Queue Message | Azure Service Bus"


def test_dependency_extraction_failure_keeps_span(caplog):
    record = _request_record(
        type="Dependencies", dependencyType="HTTP", name="GET", properties={"Custom": "1"}
    )
    with caplog.at_level(logging.ERROR, logger="appinsights_otlp"):
        ctx = TelemetryBatchConverter().run({"records": [record]})
    spans = _spans(ctx.request)
    assert len(spans) == 1
    assert ctx.partial == 1
    span = spans[0]
    assert span.name == "HTTP GET"
    assert span.kind == Span.SPAN_KIND_CLIENT
    assert span.end_time_unix_nano - span.start_time_unix_nano == 150_000_000
    assert _pairs(span.attributes) == [
        ("http.method", "GET"),
        ("applicationinsights.dependency_type", "HTTP"),
        ("applicationinsights.properties.custom", "1"),
    ]
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_properties_mapped_in_order_with_denylist():
    record = _request_record(
        properties={
            "LogLevel": "Information",
            "Category": "Host.Results",
            "OperationName": "GET /api",
            "MyKey": "v",
            "Trigger Reason": "",
            "ProcessId": "100",
            "HostInstanceId": "h1",
        }
    )
    span = _spans(convert_document({"records": [record]}))[0]
    assert _pairs(span.attributes) == [
        ("applicationinsights.properties.mykey", "v"),
        ("applicationinsights.properties.trigger_reason", ""),
    ]


def test_missing_operation_id_skipped_with_warning(caplog):
    records = [
        _request_record(operationId=""),
        {"id": SPAN_HEX, "type": "Requests"},
        _request_record(name="kept"),
    ]
    with caplog.at_level(logging.WARNING, logger="appinsights_otlp"):
        ctx = TelemetryBatchConverter().run({"records": records})
    assert [s.name for s in _spans(ctx.request)] == ["kept"]
    assert ctx.skipped == 2
    assert ctx.converted == 1
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert "operationId" in warnings[0].getMessage()


def test_skipped_record_fields_are_not_touched():
    # Invalid field types would fail validation if the record were read.
    records = [{"operationId": None, "durationMs": "not-a-number", "id": 5}]
    request = convert_document({"records": records})
    assert _spans(request) == []


def test_n_records_one_resource_group_n_scope_groups():
    records = [
        _request_record(id=f"{i:016x}", appRoleName=f"svc-{i}", sdkVersion=f"dotnet:{i}.0")
        for i in range(1, 5)
    ]
    request = convert_document({"records": records})
    assert len(request.resource_spans) == 1
    resource_spans = request.resource_spans[0]
    assert len(resource_spans.scope_spans) == 4
    assert all(len(ss.spans) == 1 for ss in resource_spans.scope_spans)
    assert [ss.scope.version for ss in resource_spans.scope_spans] == ["1.0", "2.0", "3.0", "4.0"]


def test_resource_attributes_reflect_last_record_only():
    records = [
        _request_record(
            appRoleName="first",
            appRoleInstance="vm-1",
            properties={"ProcessId": "1", "HostInstanceId": "host-1"},
        ),
        _request_record(id="bbbbbbbbbbbbbbbb", appRoleName="last"),
    ]
    request = convert_document({"records": records})
    assert _pairs(request.resource_spans[0].resource.attributes) == [("service.name", "last")]


def test_skipped_last_record_does_not_reset_resource():
    records = [_request_record(appRoleName="only"), {"type": "Requests"}]
    request = convert_document({"records": records})
    assert _pairs(request.resource_spans[0].resource.attributes) == [("service.name", "only")]


def test_empty_batch_has_single_empty_resource_group():
    request = convert_document({"records": []})
    assert len(request.resource_spans) == 1
    assert len(request.resource_spans[0].scope_spans) == 0


def test_instrumentation_scope_from_sdk_version():
    request = convert_document({"records": [_request_record(sdkVersion="azurefunctions:4.16.5")]})
    scope = request.resource_spans[0].scope_spans[0].scope
    assert (scope.name, scope.version) == ("azurefunctions", "4.16.5")


def test_parse_sdk_version_defaults():
    assert parse_sdk_version("") == ("applicationinsights", "")
    assert parse_sdk_version("python") == ("python", "")
    assert parse_sdk_version("a:b:c") == ("a", "b")


def test_pascal_case_diagnostic_export_record():
    record = {
        "OperationId": TRACE_HEX,
        "ParentId": TRACE_HEX,
        "Id": SPAN_HEX,
        "Type": "AppRequests",
        "time": "2023-01-01T00:00:00.0000000Z",
        "DurationMs": 2.5,
        "Name": "POST /orders",
        "AppRoleName": "orders",
        "SDKVersion": "dotnetc:2.21.0",
    }
    request = convert_document({"records": [record]})
    span = _spans(request)[0]
    assert span.name == "POST /orders"
    assert span.kind == Span.SPAN_KIND_SERVER
    assert span.end_time_unix_nano - span.start_time_unix_nano == 2_500_000
    assert _pairs(request.resource_spans[0].resource.attributes) == [("service.name", "orders")]


def test_malformed_span_id_aborts_batch():
    with pytest.raises(MalformedIdentifierError):
        convert_document({"records": [_request_record(), _request_record(id="abc")]})


def test_missing_duration_aborts_batch():
    record = _request_record()
    del record["durationMs"]
    with pytest.raises(MissingFieldError):
        convert_document({"records": [record]})


def test_missing_time_aborts_batch():
    record = _request_record()
    del record["time"]
    with pytest.raises(MalformedTimestampError):
        convert_document({"records": [record]})


def test_wrong_type_of_span_name_aborts_batch():
    with pytest.raises(FieldTypeError):
        convert_document({"records": [_request_record(name=123)]})


def test_wrong_type_of_typed_field_aborts_batch():
    with pytest.raises(ValidationError):
        convert_document({"records": [_request_record(durationMs="slow")]})


def test_request_ignores_wrong_type_in_dependency_fields():
    record = _request_record(resultCode=200, dependencyType=7, data={"x": 1})
    ctx = TelemetryBatchConverter().run({"records": [record]})
    assert ctx.converted == 1
    assert ctx.partial == 0
    span = _spans(ctx.request)[0]
    assert span.name == "GET /api"
    assert span.kind == Span.SPAN_KIND_SERVER


def test_dependency_field_of_wrong_type_is_partial(caplog):
    record = _request_record(
        type="Dependencies", dependencyType="HTTP", name="GET /api/orders", resultCode=200
    )
    with caplog.at_level(logging.ERROR, logger="appinsights_otlp"):
        ctx = TelemetryBatchConverter().run({"records": [record]})
    assert ctx.converted == 1
    assert ctx.partial == 1
    span = _spans(ctx.request)[0]
    assert span.name == "HTTP GET"
    assert span.kind == Span.SPAN_KIND_CLIENT
    assert _pairs(span.attributes) == [
        ("http.method", "GET"),
        ("http.target", "/api/orders"),
        ("applicationinsights.dependency_type", "HTTP"),
    ]
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert errors and isinstance(errors[0].exc_info[1], FieldTypeError)


def test_unexpected_id_length_logged_at_debug(caplog):
    record = _request_record(operationId="0102", id="0a0b")
    with caplog.at_level(logging.DEBUG, logger="appinsights_otlp"):
        span = _spans(convert_document({"records": [record]}))[0]
    assert span.trace_id == b"\x01\x02"
    assert any("unexpected id length" in r.getMessage() for r in caplog.records)


def test_regular_id_length_not_reported(caplog):
    with caplog.at_level(logging.DEBUG, logger="appinsights_otlp"):
        convert_document({"records": [_request_record()]})
    assert not any("unexpected id length" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize(
    "document",
    ["{not json", "[]", {"value": []}, {"records": {"a": 1}}, {"records": ["x"]}],
)
def test_malformed_document(document):
    with pytest.raises(MalformedDocumentError):
        convert_document(document)


def test_converter_instances_do_not_share_state():
    converter = TelemetryBatchConverter()
    first = converter.convert({"records": [_request_record(appRoleName="a")]})
    second = converter.convert({"records": [_request_record(appRoleName="b")]})
    assert len(_spans(first)) == 1
    assert len(_spans(second)) == 1
    assert _pairs(first.resource_spans[0].resource.attributes) == [("service.name", "a")]
