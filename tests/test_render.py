"""Node rendering tests: operators, parameters and pruning."""

import pytest

from pymagicquery import (
    Alias,
    Between,
    BinaryOperator,
    ColRef,
    Connective,
    ConstNode,
    Expression,
    Function,
    Node,
    OperatorKind,
    OrderBy,
    Parameter,
    Reserved,
    Table,
    UnaryOperator,
    UnquotedParameter,
    render,
)
from pymagicquery._errors import (
    ERR_MSG_UNSUPPORTED_TYPE,
    MaxDepthExceededError,
    MissingParameterError,
    UnsupportedNodeError,
    UnsupportedTypeError,
)
from pymagicquery._renderer import Renderer
from pymagicquery.dialect.mysql import MySQLDialect


def eq(column, param):
    return BinaryOperator(OperatorKind.EQUAL, ColRef(column), Parameter(param))


class TestBinaryOperators:
    @pytest.mark.parametrize(
        "op,expected",
        [
            (OperatorKind.EQUAL, "a = 1"),
            (OperatorKind.DIFFERENT, "a <> 1"),
            (OperatorKind.NOT_EQUAL, "a != 1"),
            (OperatorKind.LESS, "a < 1"),
            (OperatorKind.LESS_OR_EQUAL, "a <= 1"),
            (OperatorKind.GREATER, "a > 1"),
            (OperatorKind.GREATER_OR_EQUAL, "a >= 1"),
            (OperatorKind.NULL_SAFE_EQUAL, "a <=> 1"),
            (OperatorKind.LIKE, "a LIKE 1"),
            (OperatorKind.NOT_LIKE, "a NOT LIKE 1"),
            (OperatorKind.PLUS, "a + 1"),
            (OperatorKind.MINUS, "a - 1"),
            (OperatorKind.MULTIPLY, "a * 1"),
            (OperatorKind.DIVIDE, "a / 1"),
            (OperatorKind.MODULO, "a % 1"),
            (OperatorKind.BITWISE_AND, "a & 1"),
            (OperatorKind.BITWISE_OR, "a | 1"),
            (OperatorKind.BITWISE_XOR, "a ^ 1"),
        ],
    )
    def test_default_rule(self, op, expected):
        assert render(BinaryOperator(op, ColRef("a"), ConstNode(1))) == expected

    def test_bound_parameter(self):
        node = BinaryOperator(OperatorKind.GREATER, ColRef("age"), Parameter("min"))
        assert render(node, {"min": 18}) == "age > 18"

    def test_string_parameter_is_escaped(self):
        assert render(eq("name", "name"), {"name": "O'Brien"}) == "name = 'O''Brien'"

    def test_unbound_right_prunes(self):
        node = BinaryOperator(OperatorKind.GREATER, ColRef("age"), Parameter("min"))
        assert render(node, {}) == ""

    def test_unbound_left_prunes(self):
        node = BinaryOperator(OperatorKind.BITWISE_AND, Parameter("mask"), ColRef("flags"))
        assert render(node, {}) == ""

    def test_none_value_counts_as_unbound(self):
        node = BinaryOperator(OperatorKind.LESS, ColRef("age"), Parameter("max"))
        assert render(node, {"max": None}) == ""

    def test_non_extrapolated_keeps_placeholder(self):
        node = BinaryOperator(OperatorKind.GREATER, ColRef("age"), Parameter("min"))
        assert render(node, {}, extrapolate=False) == "age > :min"

    def test_missing_operand_raises(self):
        with pytest.raises(UnsupportedNodeError):
            render(BinaryOperator(OperatorKind.PLUS, None, ConstNode(1)))

    def test_connective_op_rejected(self):
        with pytest.raises(ValueError):
            BinaryOperator(OperatorKind.AND, ColRef("a"), ColRef("b"))


class TestEquality:
    def test_bound(self):
        assert render(eq("id", "x"), {"x": 5}) == "id = 5"

    def test_unbound_becomes_null_test(self):
        assert render(eq("id", "x"), {}) == "id IS null"

    def test_none_value_becomes_null_test(self):
        assert render(eq("id", "x"), {"x": None}) == "id IS null"

    def test_null_test_without_extrapolation(self):
        assert render(eq("id", "x"), {}, extrapolate=False) == "id IS null"

    def test_bound_without_extrapolation(self):
        assert render(eq("id", "x"), {"x": 5}, extrapolate=False) == "id = :x"

    def test_absent_left_prunes(self):
        node = BinaryOperator(OperatorKind.EQUAL, Parameter("a"), Parameter("b"))
        assert render(node, {}) == ""

    def test_not_equal_is_not_lenient(self):
        node = BinaryOperator(OperatorKind.NOT_EQUAL, ColRef("id"), Parameter("x"))
        assert render(node, {}) == ""


class TestInList:
    def test_bare_parameter(self):
        node = BinaryOperator(OperatorKind.IN, ColRef("id"), Parameter("ids"))
        assert render(node, {"ids": [1, 2, 3]}) == "id IN (1, 2, 3)"

    def test_bare_parameter_is_wrapped_in_place(self):
        param = Parameter("ids")
        node = BinaryOperator(OperatorKind.IN, ColRef("id"), param)
        render(node, {"ids": [1]})
        assert node.right == Expression([param], brackets=True)
        assert node.right.subtree[0] is param

    def test_wrapping_is_idempotent(self):
        node = BinaryOperator(OperatorKind.IN, ColRef("id"), Parameter("ids"))
        first = render(node, {"ids": [1, 2]})
        second = render(node, {"ids": [1, 2]})
        assert first == second == "id IN (1, 2)"
        assert len(node.right.subtree) == 1
        assert isinstance(node.right.subtree[0], Parameter)

    def test_string_values(self):
        node = BinaryOperator(OperatorKind.IN, ColRef("tag"), Parameter("tags"))
        assert render(node, {"tags": ("a", "b")}) == "tag IN ('a', 'b')"

    def test_empty_collection_is_false(self):
        node = BinaryOperator(OperatorKind.IN, ColRef("id"), Parameter("ids"))
        assert render(node, {"ids": []}) == "FALSE"

    def test_empty_collection_ignores_left(self):
        node = BinaryOperator(OperatorKind.IN, Parameter("unbound"), Parameter("ids"))
        assert render(node, {"ids": []}) == "FALSE"

    def test_not_in_empty_collection_is_false(self):
        node = BinaryOperator(OperatorKind.NOT_IN, ColRef("id"), Parameter("ids"))
        assert render(node, {"ids": []}) == "FALSE"

    def test_not_in(self):
        node = BinaryOperator(OperatorKind.NOT_IN, ColRef("id"), Parameter("ids"))
        assert render(node, {"ids": [4]}) == "id NOT IN (4)"

    def test_unbound_raises(self):
        node = BinaryOperator(OperatorKind.IN, ColRef("id"), Parameter("ids"))
        with pytest.raises(MissingParameterError) as exc_info:
            render(node, {})
        assert exc_info.value.parameter == "ids"

    def test_none_value_raises(self):
        node = BinaryOperator(OperatorKind.IN, ColRef("id"), Parameter("ids"))
        with pytest.raises(MissingParameterError):
            render(node, {"ids": None})

    def test_unbound_raises_without_extrapolation(self):
        node = BinaryOperator(OperatorKind.IN, ColRef("id"), Parameter("ids"))
        with pytest.raises(MissingParameterError):
            render(node, {}, extrapolate=False)

    def test_bound_without_extrapolation(self):
        node = BinaryOperator(OperatorKind.IN, ColRef("id"), Parameter("ids"))
        assert render(node, {"ids": [1, 2]}, extrapolate=False) == "id IN (:ids)"

    def test_literal_list(self):
        values = Expression([ConstNode(1), ConstNode(2)], brackets=True, delimiter=", ")
        node = BinaryOperator(OperatorKind.IN, ColRef("id"), values)
        assert render(node) == "id IN (1, 2)"


class TestConnective:
    def test_and(self):
        node = Connective(OperatorKind.AND, [eq("a", "a"), eq("b", "b")])
        assert render(node, {"a": 1, "b": 2}) == "a = 1 AND b = 2"

    def test_or(self):
        node = Connective(OperatorKind.OR, [eq("a", "a"), eq("b", "b")])
        assert render(node, {"a": 1, "b": 2}) == "a = 1 OR b = 2"

    def test_xor(self):
        node = Connective(OperatorKind.XOR, [ColRef("a"), ColRef("b")])
        assert render(node) == "a XOR b"

    def test_pruned_operand_dropped(self):
        greater = BinaryOperator(OperatorKind.GREATER, ColRef("b"), Parameter("b"))
        node = Connective(OperatorKind.AND, [eq("a", "a"), greater, eq("c", "c")])
        assert render(node, {"a": 1, "c": 3}) == "a = 1 AND c = 3"

    def test_all_operands_pruned(self):
        node = Connective(
            OperatorKind.OR,
            [
                BinaryOperator(OperatorKind.LESS, ColRef("a"), Parameter("a")),
                BinaryOperator(OperatorKind.LIKE, ColRef("b"), Parameter("b")),
            ],
        )
        assert render(node, {}) == ""

    def test_bracketed_group(self):
        inner = Connective(OperatorKind.OR, [eq("a", "a"), eq("b", "b")])
        node = Connective(
            OperatorKind.AND,
            [Expression([inner], brackets=True), eq("c", "c")],
        )
        assert render(node, {"a": 1, "b": 2, "c": 3}) == "(a = 1 OR b = 2) AND c = 3"

    def test_pruned_group_drops_brackets(self):
        inner = Connective(
            OperatorKind.OR,
            [
                BinaryOperator(OperatorKind.LESS, ColRef("a"), Parameter("a")),
                BinaryOperator(OperatorKind.LESS, ColRef("b"), Parameter("b")),
            ],
        )
        node = Connective(
            OperatorKind.AND,
            [Expression([inner], brackets=True), eq("c", "c")],
        )
        assert render(node, {"c": 3}) == "c = 3"

    def test_invalid_op(self):
        with pytest.raises(ValueError):
            Connective(OperatorKind.PLUS, [])


class TestUnary:
    def test_not(self):
        assert render(UnaryOperator(OperatorKind.NOT, ColRef("active"))) == "NOT active"

    def test_negate(self):
        assert render(UnaryOperator(OperatorKind.NEGATE, ColRef("x"))) == "-x"

    def test_negate_negative_literal(self):
        assert render(UnaryOperator(OperatorKind.NEGATE, ConstNode(-5))) == "- -5"

    def test_is_null(self):
        assert render(UnaryOperator(OperatorKind.IS_NULL, ColRef("email"))) == "email IS NULL"

    def test_is_not_null(self):
        node = UnaryOperator(OperatorKind.IS_NOT_NULL, ColRef("email"))
        assert render(node) == "email IS NOT NULL"

    def test_pruned_operand(self):
        assert render(UnaryOperator(OperatorKind.NOT, Parameter("flag")), {}) == ""

    def test_missing_operand_raises(self):
        with pytest.raises(UnsupportedNodeError):
            render(UnaryOperator(OperatorKind.NOT, None))

    def test_binary_op_rejected(self):
        with pytest.raises(ValueError):
            UnaryOperator(OperatorKind.PLUS, ColRef("a"))


class TestBetween:
    @pytest.fixture
    def node(self):
        return Between(ColRef("age"), Parameter("lo"), Parameter("hi"))

    def test_both_bounds(self, node):
        assert render(node, {"lo": 18, "hi": 30}) == "age BETWEEN 18 AND 30"

    def test_low_only(self, node):
        assert render(node, {"lo": 18}) == "age >= 18"

    def test_high_only(self, node):
        assert render(node, {"hi": 30}) == "age <= 30"

    def test_no_bounds(self, node):
        assert render(node, {}) == ""


class TestFunction:
    def test_count_star(self):
        assert render(Function("COUNT", [ColRef("*")])) == "COUNT(*)"

    def test_distinct(self):
        assert render(Function("COUNT", [ColRef("id")], distinct=True)) == "COUNT(DISTINCT id)"

    def test_no_args(self):
        assert render(Function("NOW")) == "NOW()"

    def test_several_args(self):
        node = Function("COALESCE", [ColRef("nick"), ColRef("name")])
        assert render(node) == "COALESCE(nick, name)"

    def test_pruned_arg_prunes_call(self):
        node = Function("LOWER", [Parameter("name")])
        assert render(node, {}) == ""


class TestLeaves:
    def test_plain_column(self):
        assert render(ColRef("id")) == "id"

    def test_qualified_column(self):
        assert render(ColRef("id", table="u", database="shop")) == "shop.u.id"

    def test_reserved_column_is_quoted(self):
        assert render(ColRef("order")) == "`order`"

    def test_column_with_space_is_quoted(self):
        assert render(ColRef("my col")) == "`my col`"

    def test_table_star(self):
        assert render(ColRef("*", table="u")) == "u.*"

    def test_postgres_quoting(self, pg_dialect):
        assert render(ColRef("order"), dialect=pg_dialect) == '"order"'

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "NULL"),
            (True, "TRUE"),
            (False, "FALSE"),
            (42, "42"),
            (1.5, "1.5"),
            ("it's", "'it''s'"),
        ],
    )
    def test_const(self, value, expected):
        assert render(ConstNode(value)) == expected

    def test_reserved(self):
        assert render(Reserved("CURRENT_TIMESTAMP")) == "CURRENT_TIMESTAMP"

    def test_alias(self):
        node = Alias(Function("COUNT", [ColRef("*")]), "total")
        assert render(node) == "COUNT(*) AS total"

    def test_alias_of_pruned_node(self):
        assert render(Alias(Parameter("x"), "x_value"), {}) == ""

    def test_order_by(self):
        assert render(OrderBy(ColRef("name"), "desc")) == "name DESC"

    def test_order_by_without_direction(self):
        assert render(OrderBy(ColRef("name"))) == "name"

    def test_table(self):
        assert render(Table("users", alias="u")) == "users AS u"

    def test_joined_table(self):
        condition = BinaryOperator(
            OperatorKind.EQUAL, ColRef("user_id", table="o"), ColRef("id", table="u"),
        )
        node = Table("orders", alias="o", join_type="LEFT JOIN", condition=condition)
        assert render(node) == "LEFT JOIN orders AS o ON o.user_id = u.id"

    def test_joined_table_with_pruned_condition(self):
        condition = BinaryOperator(OperatorKind.GREATER, ColRef("total"), Parameter("min"))
        node = Table("orders", join_type="JOIN", condition=condition)
        assert render(node, {}) == "JOIN orders"

    def test_parameter_bound_to_list(self):
        assert render(Parameter("x"), {"x": [1, 2]}) == "1, 2"

    def test_parameter_without_extrapolation(self):
        assert render(Parameter("x"), {"x": 1}, extrapolate=False) == ":x"


class TestUnquotedParameter:
    def test_bound(self):
        assert render(UnquotedParameter("n"), {"n": 10}) == "10"

    def test_string_is_not_quoted(self):
        assert render(UnquotedParameter("n"), {"n": "10"}) == "10"

    def test_unbound(self):
        assert render(UnquotedParameter("n"), {}) == ""

    def test_unbound_without_extrapolation(self):
        assert render(UnquotedParameter("n"), {}, extrapolate=False) == ":n"

    def test_bound_without_extrapolation(self):
        assert render(UnquotedParameter("n"), {"n": 10}, extrapolate=False) == "10"

    def test_collection(self):
        assert render(UnquotedParameter("n"), {"n": [5, 10]}) == "5, 10"

    @pytest.mark.parametrize(
        "value",
        ["5; DROP TABLE t", "1 OR 1=1", "", -1, 1.5, True, b"10", "\uff11"],
    )
    def test_non_numeral_rejected(self, value):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            render(UnquotedParameter("n"), {"n": value})
        assert exc_info.value.user_message == ERR_MSG_UNSUPPORTED_TYPE

    def test_non_numeral_rejected_without_extrapolation(self):
        with pytest.raises(UnsupportedTypeError):
            render(UnquotedParameter("n"), {"n": "10 --"}, extrapolate=False)


class TestDispatcher:
    @pytest.fixture
    def renderer(self):
        return Renderer(MySQLDialect(), {"x": 1})

    def test_list_drops_absent(self, renderer):
        nodes = [ColRef("a"), Parameter("missing"), ColRef("b")]
        assert renderer.render(nodes, ", ") == "a, b"

    def test_empty_list_is_absent(self, renderer):
        assert renderer.render([]) is None

    def test_all_absent_is_absent(self, renderer):
        assert renderer.render([Parameter("missing")]) is None

    def test_none_is_absent(self, renderer):
        assert renderer.render(None) is None

    def test_wrap_in_brackets(self, renderer):
        assert renderer.render([ColRef("a"), Parameter("x")], ", ", True) == "(a, 1)"

    def test_unknown_node_raises(self, renderer):
        class Custom(Node):
            pass

        with pytest.raises(UnsupportedNodeError):
            renderer.render(Custom())

    def test_max_depth(self):
        node = ColRef("a")
        for _ in range(10):
            node = UnaryOperator(OperatorKind.NOT, node)
        with pytest.raises(MaxDepthExceededError):
            render(node, max_depth=5)

    def test_within_max_depth(self):
        node = UnaryOperator(OperatorKind.NOT, UnaryOperator(OperatorKind.NOT, ColRef("a")))
        assert render(node, max_depth=3) == "NOT NOT a"


class TestToSql:
    def test_node_to_sql(self):
        assert ColRef("id").to_sql() == "id"

    def test_node_to_sql_with_parameters(self, pg_dialect):
        node = eq("name", "name")
        assert node.to_sql({"name": "bob"}, dialect=pg_dialect) == "name = 'bob'"
