from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Dict, List, Optional, Union

import pytest

from recnorm.core.config import NormalizerConfig
from recnorm.core.errors import UnsupportedFieldKindError, UnsupportedRecordError
from recnorm.core.schema.descriptors import FieldKind
from recnorm.core.schema.reflection import (
    classify_annotation,
    describe_record,
    is_record_type,
    is_record_value,
    record_schema,
)
from recnorm.tests.records import Address, Child, ComplexNested, Order, make_order


@dataclass
class WithDict:
    mapping: Dict[str, int] = field(default_factory=dict)


@dataclass
class WithUnion:
    value: Union[int, str] = 0


@dataclass
class AltTags:
    value: int = field(default=0, metadata={"proto": "p_value", "text": "t_value"})


@pytest.mark.parametrize(
    "annotation, kind, numeric_type",
    [
        (int, FieldKind.SCALAR_NUMERIC, int),
        (float, FieldKind.SCALAR_NUMERIC, float),
        (Optional[int], FieldKind.SCALAR_NUMERIC, int),
        (int | None, FieldKind.SCALAR_NUMERIC, int),
        (Annotated[int, "meta"], FieldKind.SCALAR_NUMERIC, int),
        (str, FieldKind.SCALAR_OTHER, None),
        (bool, FieldKind.SCALAR_OTHER, None),
        (Child, FieldKind.NESTED_RECORD, None),
        (Optional[Address], FieldKind.NESTED_RECORD, None),
        (List[int], FieldKind.LIST_OF_SCALAR, None),
        (list[str], FieldKind.LIST_OF_SCALAR, None),
        (Optional[List[bool]], FieldKind.LIST_OF_SCALAR, None),
        (List[Child], FieldKind.LIST_OF_RECORD, None),
        (List[Optional[Address]], FieldKind.LIST_OF_RECORD, None),
    ],
)
def test_classify_annotation(annotation, kind, numeric_type):
    assert classify_annotation(annotation) == (kind, numeric_type)


@pytest.mark.parametrize(
    "annotation",
    [Dict[str, int], Union[int, str], list, List[Dict[str, int]], bytes, object],
)
def test_classify_annotation_rejects_unsupported(annotation):
    assert classify_annotation(annotation) is None


def test_bool_is_not_numeric():
    assert classify_annotation(bool) == (FieldKind.SCALAR_OTHER, None)


def test_record_detection():
    assert is_record_type(Child)
    assert is_record_type(Order)
    assert not is_record_type(dict)
    assert is_record_value(Child())
    assert is_record_value(make_order())
    assert not is_record_value(Child)
    assert not is_record_value({"a": 1})


def test_dataclass_descriptors_in_declaration_order():
    fields = describe_record(ComplexNested())
    assert [f.identifier for f in fields] == [
        "TestId",
        "StringValue",
        "IntArray",
        "ComplexNestedValue",
        "ComplexNestedValue1",
        "ComplexNestedValue2",
    ]
    assert [f.kind for f in fields] == [
        FieldKind.SCALAR_NUMERIC,
        FieldKind.SCALAR_OTHER,
        FieldKind.LIST_OF_SCALAR,
        FieldKind.NESTED_RECORD,
        FieldKind.NESTED_RECORD,
        FieldKind.NESTED_RECORD,
    ]
    assert fields[4].primary_name == "c_n_v1"
    assert fields[5].primary_name is None
    assert fields[5].secondary_name == "c_n_v2"


def test_pydantic_descriptors_use_extra_and_alias():
    fields = {f.identifier: f for f in describe_record(make_order())}

    assert fields["order_id"].primary_name == "id"
    assert fields["order_id"].current_value == 7
    assert fields["customer_name"].secondary_name == "customerName"
    assert fields["total"].numeric_type is float
    assert fields["tags"].kind == FieldKind.LIST_OF_SCALAR
    assert fields["shipping"].kind == FieldKind.NESTED_RECORD
    assert fields["lines"].kind == FieldKind.LIST_OF_RECORD


def test_annotation_tags_follow_config():
    cfg = NormalizerConfig(primary_tag="proto", secondary_tag="text")
    (f,) = describe_record(AltTags(), cfg)
    assert f.primary_name == "p_value"
    assert f.secondary_name == "t_value"

    (default,) = describe_record(AltTags())
    assert default.declared_name is None


def test_unsupported_field_kind_is_a_schema_error():
    with pytest.raises(UnsupportedFieldKindError) as ei:
        describe_record(WithDict())
    assert ei.value.identifier == "mapping"
    assert "WithDict" in str(ei.value)

    with pytest.raises(UnsupportedFieldKindError):
        describe_record(WithUnion())


def test_non_record_values_are_rejected():
    with pytest.raises(UnsupportedRecordError):
        describe_record({"TestId": 1})
    with pytest.raises(UnsupportedRecordError):
        record_schema(dict)


def test_descriptor_to_dict_is_json_friendly():
    (f,) = describe_record(Child(Num=3))
    assert f.to_dict() == {
        "identifier": "Num",
        "kind": "scalar-numeric",
        "primary_name": None,
        "secondary_name": None,
        "numeric_type": "int",
    }
