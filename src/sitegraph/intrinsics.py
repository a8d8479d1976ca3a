"""Reference helpers for resource properties.

Cross-resource references are plain CloudFormation intrinsic shapes so the
graph can be handed to a declarative engine unchanged:

- ``{"Ref": "Id"}``
- ``{"Fn::GetAtt": ["Id", "Attribute"]}``
- ``{"Fn::Sub": "text ${Id} ${Id.Attribute} ${AWS::Pseudo}"}``
"""

from __future__ import annotations

import re
from typing import Any

_SUB_VARIABLE_RE = re.compile(r"\$\{([A-Za-z][A-Za-z0-9]*)(?:\.[A-Za-z0-9.]+)?\}")
_INTRINSICS = {"Ref", "Fn::GetAtt", "Fn::Sub"}

ACCOUNT_ID = "${AWS::AccountId}"
STACK_NAME = "${AWS::StackName}"


def ref(resource_id: str) -> dict[str, Any]:
    return {"Ref": resource_id}


def get_att(resource_id: str, attribute: str) -> dict[str, Any]:
    return {"Fn::GetAtt": [resource_id, attribute]}


def sub(template: str) -> dict[str, Any]:
    return {"Fn::Sub": template}


def is_reference(value: Any) -> bool:
    return isinstance(value, dict) and len(value) == 1 and next(iter(value)) in _INTRINSICS


def find_references(value: Any) -> list[str]:
    """Collect logical ids referenced anywhere inside a property value.

    Pseudo parameters (``AWS::*``) are not resources and are skipped. Ids are
    returned once each, in the order they are first found.
    """
    found: list[str] = []
    _collect(value, found)
    return found


def _collect(value: Any, found: list[str]) -> None:
    if isinstance(value, dict):
        if is_reference(value):
            key, inner = next(iter(value.items()))
            if key == "Ref" and isinstance(inner, str):
                _add(inner, found)
                return
            if key == "Fn::GetAtt" and isinstance(inner, list) and inner:
                _add(inner[0], found)
                return
            if key == "Fn::Sub" and isinstance(inner, str):
                for match in _SUB_VARIABLE_RE.finditer(inner):
                    _add(match.group(1), found)
                return
        for nested in value.values():
            _collect(nested, found)
    elif isinstance(value, (list, tuple)):
        for nested in value:
            _collect(nested, found)


def _add(resource_id: str, found: list[str]) -> None:
    if resource_id.startswith("AWS::"):
        return
    if resource_id not in found:
        found.append(resource_id)
