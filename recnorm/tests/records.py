"""Record types shared by the test modules (and importable as CLI targets)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class Args:
    pass


@dataclass
class Sample:
    TestId: int = 0
    PtrValue: Optional[Args] = None


@dataclass
class ScalarSlice:
    Values: List[int] = field(default_factory=list)


@dataclass
class Child:
    Num: int = 0


@dataclass
class ChildSlice:
    Values: List[Child] = field(default_factory=list)


@dataclass
class NestedValue:
    PtrValue: Optional[Args] = None


@dataclass
class Nested:
    TestId: int = 0
    NestedValue: Optional[NestedValue] = None


@dataclass
class Tagged:
    Value: int = field(default=0, metadata={"wire": "test_name_proto", "json": "id"})
    Value1: int = field(default=0, metadata={"wire": "", "json": "test_name_json"})


@dataclass
class SomeArgs:
    pass


@dataclass
class ChildValue:
    TestId: int = 0
    StringValue: str = ""
    IntArray: Optional[List[int]] = None
    Args: Optional[SomeArgs] = None


@dataclass
class ComplexNestedValue:
    TestId: int = 0
    StringValue: str = ""
    IntArray: Optional[List[int]] = None
    ChildValueArr: Optional[List[ChildValue]] = None
    ChildValue1: Optional[ChildValue] = None


@dataclass
class ComplexNested:
    TestId: int = 0
    StringValue: str = field(default="", metadata={"wire": "s_value", "json": "json_s_value"})
    IntArray: Optional[List[int]] = field(default=None, metadata={"wire": "new_name", "json": "json_new_name"})
    ComplexNestedValue: Optional[ComplexNestedValue] = None
    ComplexNestedValue1: Optional[ComplexNestedValue] = field(
        default=None, metadata={"wire": "c_n_v1", "json": "c_n_v111"}
    )
    ComplexNestedValue2: Optional[ComplexNestedValue] = field(default=None, metadata={"json": "c_n_v2"})


@dataclass
class Measurement:
    ratio: float = 0.0
    count: int = 0
    label: str = ""
    enabled: bool = False


@dataclass
class FoldCollision:
    Foo: int = 0
    x: int = field(default=0, metadata={"json": "foo"})


@dataclass
class SharedName:
    a: int = field(default=0, metadata={"json": "k"})
    b: int = field(default=0, metadata={"wire": "k"})

class Address(BaseModel):
    street: str = ""
    house_number: int = 0


class Order(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(default=0, json_schema_extra={"wire": "id"})
    customer_name: str = Field(default="", alias="customerName")
    total: float = 0.0
    tags: List[str] = Field(default_factory=list)
    shipping: Optional[Address] = None
    lines: List[Address] = Field(default_factory=list)


def make_order() -> Order:
    return Order(
        order_id=7,
        customer_name="ada",
        total=1.5,
        tags=["a", "b"],
        shipping=Address(street="main", house_number=1),
        lines=[Address(street="x", house_number=2)],
    )
