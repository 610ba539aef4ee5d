"""Emitted modules must parse as TypeScript."""

from __future__ import annotations

from typing import List

import pytest
import tree_sitter_typescript
from tree_sitter import Language, Parser

from sigil import compile


TYPESCRIPT = Language(tree_sitter_typescript.language_typescript())

PROGRAMS = {
    "branching": """
Define function can_cancel taking order as Order returning Boolean:
  If order.status is "Pending" then:
    Return true.
  Otherwise:
    Return false.
  End if.
End function.
""",
    "effects": """
Define effectful function cancel taking id as String:
  Let order be load_order of id.
  If order.total > 100 and not (order.status is "Shipped") then:
    Call send_email with order.customer_email, "Cancelled " + order.id.
    Call save_order with order.
  End if.
End function.
Define effectful function total_of taking id as String returning Number:
  Return (load_order of id).total * 2.
End function.
""",
    "declarations": """
Define type Priority as "Low" or "High".
Define type Sku as String.
Define record Parcel:
  sku as Sku.
  weights as List of Number.
  owner as Order.
  sent as DateTime.
End record.
Define function to_sku taking raw as String returning Sku:
  Return Sku of raw.
End function.
""",
    "loops": """
Define effectful function save_all taking orders as Orders:
  For each order in orders:
    If order.status is not "Cancelled" then:
      Call save_order with order.
    End if.
  End for.
End function.
""",
    "operators": """
Define function f taking a as Number, b as Number, c as Number, flag as Boolean returning Boolean:
  Let left be (a - b) - c.
  Let right be a - (b - c).
  Let scaled be -(a + b) * c / 2.
  Return not (a is b) and (flag or a is not c) or left <= right and scaled >= 0.
End function.
""",
    "literals": """
Define function f returning List of Number:
  Let greeting be "café \\"quoted\\"\\n\\ttab".
  Let words be ["a", "b"].
  Return [2.0, 0.5, 10, 12345678901234567890].
End function.
""",
    "reserved_names": """
Define function delete taking default as Number, class as String returning Number:
  Let new be default + 1.
  Let this be class.
  Return new.
End function.
""",
    "shadowing": """
Define function f taking x as Number, xs as List of Number, flag as Boolean returning Number:
  If flag then:
    Let y be x.
    Let x be y + 1.
    For each x in xs:
      Let z be x.
    End for.
    Return x.
  End if.
  Return x.
End function.
""",
    "type_names": """
Define type Promise as String.
Define record Date:
  label as Promise.
End record.
Define effectful function stamp taking raw as String returning Promise:
  Return Promise of raw.
End function.
""",
    "conversions": """
Define function wrap taking raw as String, email as Email returning String:
  Let wrapped be Email of raw.
  Let normalized be normalize_email of raw.
  If (String of email) is "" then:
    Return String of wrapped.
  End if.
  Return format_total of 2.
End function.
""",
}


def syntax_errors(source: str) -> List[str]:
    tree = Parser(TYPESCRIPT).parse(source.encode("utf-8"))
    errors = []
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            errors.append(f"{row + 1}:{column + 1} {node.type}")
        stack.extend(node.children)
    return errors


def test_parser_detects_broken_typescript() -> None:
    assert syntax_errors("export function f(: number {\n  return;\n")
    assert syntax_errors("export function f(): number {\n  return 1;\n}\n") == []


@pytest.mark.parametrize("name", sorted(PROGRAMS))
def test_emitted_module_is_valid_typescript(name: str, registry) -> None:
    result = compile(PROGRAMS[name], registry)
    assert result.ok, [str(d) for d in result.diagnostics]
    assert syntax_errors(result.target_source) == [], result.target_source
