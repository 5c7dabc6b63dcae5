"""Tests for the promotion DSL parser and AST rendering."""

from decimal import Decimal

import pytest

from promodsl.domain import Condition, PromotionDefinition, Reward
from promodsl.dsl import (
    Comparison,
    FunctionCall,
    LexError,
    Literal,
    Logical,
    ParseError,
    PropertyAccess,
    parse,
    parse_promotion,
    strip_quotes,
    tokenize,
)

from conftest import SIMPLE_DSL


def single_condition(line: str) -> Condition:
    source = (
        'promotion: "P"\n'
        "conditions:\n"
        f"{line}\n"
        "rewards:\n"
        "- condition A discount config.discountPercent\n"
    )
    definition = parse_promotion(source)
    assert len(definition.conditions) == 1
    return definition.conditions[0]


def path(text: str) -> PropertyAccess:
    return PropertyAccess(tuple(text.split(".")))


class TestParsePromotion:
    """Whole-program parsing."""

    def test_simple_promotion(self):
        definition = parse_promotion(SIMPLE_DSL)

        assert definition.name == "Simple Test"
        assert definition.is_active is True
        assert definition.conditions == (
            Condition("A", "minimumSpending", ("config.minAmount",)),
        )
        assert definition.rewards == (
            Reward("A", "discount", ("config.discountPercent",)),
        )

    def test_parse_from_tokens(self):
        assert parse(tokenize(SIMPLE_DSL)) == parse_promotion(SIMPLE_DSL)

    def test_multiple_conditions_and_rewards_keep_order(self):
        definition = parse_promotion(
            'promotion: "Multi Test"\n'
            "conditions:\n"
            "- A minimumSpending config.minAmount\n"
            "- B itemSku config.targetSku\n"
            "- C totalAmount config.threshold\n"
            "rewards:\n"
            "- condition A discountPercentage config.discount\n"
            "- condition B freeItem config.freeProduct\n"
            "- condition C discountAmount config.discount2\n"
        )

        assert [c.name for c in definition.conditions] == ["A", "B", "C"]
        assert [c.function_name for c in definition.conditions] == [
            "minimumSpending",
            "itemSku",
            "totalAmount",
        ]
        assert [r.condition_name for r in definition.rewards] == ["A", "B", "C"]
        assert [r.reward_type for r in definition.rewards] == [
            "discountPercentage",
            "freeItem",
            "discountAmount",
        ]

    def test_unknown_function_parses_but_is_invalid(self):
        condition = single_condition("- B itemSku config.targetSku")

        assert condition.function_name == "itemSku"
        assert condition.is_valid() is False

    def test_comments_and_blank_lines(self, fixtures_dir):
        definition = parse_promotion((fixtures_dir / "complex.promo").read_text())

        assert definition.name == "Complex Test"
        assert len(definition.conditions) == 3
        assert len(definition.rewards) == 3

    def test_last_line_may_omit_newline(self):
        definition = parse_promotion(SIMPLE_DSL.rstrip("\n"))

        assert definition.rewards[0].reward_type == "discount"

    def test_nested_property_parameters(self):
        definition = parse_promotion(
            'promotion: "Property Test"\n'
            "conditions:\n"
            "- A minimumSpending customer.profile.tier.minAmount\n"
            "rewards:\n"
            "- condition A discount config.tiers.premium.discount\n"
        )

        assert definition.conditions[0].parameters == ("customer.profile.tier.minAmount",)
        assert definition.rewards[0].parameters == ("config.tiers.premium.discount",)

    def test_simple_property_parameters(self):
        definition = parse_promotion(
            'promotion: "Simple Property Test"\n'
            "conditions:\n"
            "- A minimumSpending amount\n"
            "rewards:\n"
            "- condition A discount percent\n"
        )

        assert definition.conditions[0].parameters == ("amount",)
        assert definition.rewards[0].parameters == ("percent",)

    def test_function_without_parameter(self):
        definition = parse_promotion(
            'promotion: "No Params"\n'
            "conditions:\n"
            "- A any\n"
            "rewards:\n"
            "- condition A freeShipping\n"
        )

        assert definition.conditions[0].parameters == ()
        assert definition.rewards[0].parameters == ()

    def test_reward_with_expression(self):
        definition = parse_promotion(
            'promotion: "Reward Expr"\n'
            "conditions:\n"
            "- A any\n"
            "rewards:\n"
            "- condition A points config.pointsMultiplier cart.itemsCount > 1\n"
        )

        reward = definition.rewards[0]
        assert reward.parameters == ("config.pointsMultiplier",)
        assert reward.expression == Comparison(path("cart.itemsCount"), ">", Literal(Decimal("1")))


class TestExpressions:
    """Attached expressions and their operator rules."""

    def test_path_followed_by_operator_starts_expression(self):
        condition = single_condition("- C any item.sku = config.targetSku")

        assert condition.parameters == ()
        assert condition.expression == Comparison(path("item.sku"), "=", path("config.targetSku"))

    def test_parameter_then_expression(self):
        condition = single_condition("- D minimumSpending config.minAmount item.price > 10")

        assert condition.parameters == ("config.minAmount",)
        assert condition.expression == Comparison(path("item.price"), ">", Literal(Decimal("10")))

    @pytest.mark.parametrize("operator", ["=", "!=", ">", "<", ">=", "<="])
    def test_comparison_operators(self, operator):
        condition = single_condition(f"- A any item.quantity {operator} 2.5")

        assert condition.expression == Comparison(
            path("item.quantity"), operator, Literal(Decimal("2.5"))
        )

    def test_and_chain_is_left_nested(self):
        condition = single_condition(
            "- E any item.price > 10 && item.quantity >= 2 && cart.itemsCount = 1"
        )

        expr = condition.expression
        assert isinstance(expr, Logical)
        assert isinstance(expr.left, Logical)
        assert str(expr) == "((item.price > 10 && item.quantity >= 2) && cart.itemsCount = 1)"

    def test_or_chain(self):
        condition = single_condition("- F any item.price > 10 || item.quantity >= 2")

        assert condition.expression == Logical(
            Comparison(path("item.price"), ">", Literal(Decimal("10"))),
            "||",
            Comparison(path("item.quantity"), ">=", Literal(Decimal("2"))),
        )

    def test_mixed_operators_collapse_to_and(self):
        condition = single_condition(
            '- F any item.price > 10 || item.quantity >= 2 && item.name = "x"'
        )

        assert str(condition.expression) == (
            '((item.price > 10 && item.quantity >= 2) && item.name = "x")'
        )

    def test_operator_detection_sees_string_contents(self):
        condition = single_condition('- I any item.name = "a&&b" || item.sku = "x"')

        assert condition.expression.operator == "&&"

    def test_path_followed_by_logical_operator_starts_expression(self):
        condition = single_condition("- G any item.onSale && item.price > 5")

        assert condition.parameters == ()
        assert condition.expression == Logical(
            Comparison(path("item.onSale")),
            "&&",
            Comparison(path("item.price"), ">", Literal(Decimal("5"))),
        )

    def test_bare_literal_comparison(self):
        condition = single_condition('- G any "VIP"')

        assert condition.expression == Comparison(Literal("VIP"))
        assert condition.expression.is_bare

    def test_trailing_path_is_function_parameter(self):
        condition = single_condition("- G any item.onSale")

        assert condition.parameters == ("item.onSale",)
        assert condition.expression is None

    @pytest.mark.parametrize("text", ["Blue Shirt", "", "50% off!", "a && b", "  spaced  "])
    def test_string_literal_round_trip(self, text):
        condition = single_condition(f'- H any item.name = "{text}"')

        assert condition.expression.right == Literal(text)


class TestRendering:
    """String forms used for diagnostics."""

    def test_definition_str(self):
        definition = parse_promotion(SIMPLE_DSL)

        assert str(definition) == "Promotion: Simple Test (Conditions: 1, Rewards: 1, Active: True)"
        assert str(definition.conditions[0]) == "A minimumSpending config.minAmount"
        assert str(definition.rewards[0]) == "condition A discount config.discountPercent"

    def test_condition_str_with_expression(self):
        condition = single_condition('- C any item.sku = "ITEM001"')

        assert str(condition) == 'C any item.sku = "ITEM001"'

    def test_logical_str(self):
        node = Logical(Comparison(path("a.b")), "&&", Comparison(path("c.d")))

        assert str(node) == "(a.b && c.d)"

    def test_function_call_str(self):
        node = FunctionCall("minimumSpending", (path("config.minAmount"), Literal(Decimal("5"))))

        assert str(node) == "minimumSpending(config.minAmount, 5)"


class TestParseErrors:
    """The parser stops at the first mismatch."""

    def test_missing_rewards_section(self, fixtures_dir):
        with pytest.raises(ParseError) as exc_info:
            parse_promotion((fixtures_dir / "broken.promo").read_text())

        error = exc_info.value
        assert error.expected == "'rewards'"
        assert error.found == "EOF"
        assert (error.line, error.column) == (4, 1)

    def test_empty_input(self):
        with pytest.raises(ParseError) as exc_info:
            parse_promotion("")

        assert exc_info.value.expected == "'promotion'"
        assert exc_info.value.found == "EOF"

    def test_missing_colon(self):
        with pytest.raises(ParseError) as exc_info:
            parse_promotion('promotion "X"\n')

        assert exc_info.value.expected == "':'"
        assert exc_info.value.found == "'\"X\"'"
        assert (exc_info.value.line, exc_info.value.column) == (1, 11)

    def test_empty_conditions_section(self):
        with pytest.raises(ParseError) as exc_info:
            parse_promotion(
                'promotion: "X"\nconditions:\nrewards:\n- condition A discount\n'
            )

        assert exc_info.value.expected == "'-'"
        assert exc_info.value.found == "'rewards'"
        assert exc_info.value.line == 3

    def test_reward_requires_condition_keyword(self):
        with pytest.raises(ParseError) as exc_info:
            parse_promotion(
                'promotion: "X"\nconditions:\n- A any\nrewards:\n- A discount\n'
            )

        assert exc_info.value.expected == "'condition'"
        assert exc_info.value.line == 5

    def test_keyword_cannot_name_a_condition(self):
        with pytest.raises(ParseError) as exc_info:
            single_condition("- condition minimumSpending config.minAmount")

        assert exc_info.value.expected == "IDENTIFIER"
        assert exc_info.value.found == "'condition'"

    def test_dangling_operator(self):
        with pytest.raises(ParseError) as exc_info:
            single_condition("- A minimumSpending config.minAmount =")

        assert exc_info.value.expected == "operand"
        assert exc_info.value.found == "NEWLINE"

    def test_unexpected_token_at_end_of_line(self):
        with pytest.raises(ParseError) as exc_info:
            single_condition("- A minimumSpending config.minAmount :")

        assert exc_info.value.expected == "NEWLINE"
        assert exc_info.value.found == "':'"

    def test_invalid_syntax(self):
        with pytest.raises(ParseError):
            parse_promotion(
                "\ninvalid syntax here\npromotion without colon\nconditions\n- malformed condition\n"
            )

    def test_lex_errors_propagate(self):
        with pytest.raises(LexError):
            parse_promotion('promotion: "Unclosed\nconditions:\n')

    def test_error_message_has_location(self):
        with pytest.raises(ParseError, match="line 1, column 1"):
            parse_promotion("rewards:")


class TestStripQuotes:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ('"abc"', "abc"),
            ('""', ""),
            ("", ""),
            ('"', '"'),
            ("abc", "abc"),
            ('"a"b"', 'a"b'),
        ],
    )
    def test_strip_quotes(self, text, expected):
        assert strip_quotes(text) == expected


def test_definition_is_immutable():
    definition = parse_promotion(SIMPLE_DSL)

    with pytest.raises(AttributeError):
        definition.name = "Other"  # type: ignore[misc]
    assert isinstance(definition, PromotionDefinition)
