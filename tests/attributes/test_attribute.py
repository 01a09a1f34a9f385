"""Tests for taskline.attributes — declaration, resolution and error collection."""

import pytest

from taskline import Task
from taskline.attributes import Attribute, AttributeRegistry, Errors, optional, required
from taskline.core.errors import AttributeDefinitionError


# ── Errors ───────────────────────────────────────────────────────────────


class TestErrors:
    """Ordered, de-duplicated messages per attribute."""

    def test_add_and_render(self):
        errors = Errors()
        errors.add("email", "cannot be empty")
        errors.add("email", "cannot be empty")
        errors.add("email", "is an invalid format")
        errors.add("age", "must be at least 18")

        assert len(errors) == 3
        assert errors.has("email")
        assert "age" in errors
        assert errors.to_dict() == {
            "email": ["cannot be empty", "is an invalid format"],
            "age": ["must be at least 18"],
        }
        assert str(errors) == "email cannot be empty. email is an invalid format. age must be at least 18"

    def test_empty(self):
        errors = Errors()
        errors.add("email", None)
        assert not errors
        assert errors.is_empty
        assert str(errors) == ""


# ── Definition ───────────────────────────────────────────────────────────


class TestDefinition:
    """Attribute construction and naming."""

    def test_define_many(self):
        attributes = Attribute.define("a", "b", types="integer")
        assert [a.name for a in attributes] == ["a", "b"]
        assert attributes[0].types == ("integer",)

    def test_define_requires_names(self):
        with pytest.raises(ValueError, match="no attributes given"):
            Attribute.define()

    def test_as_only_for_single_attribute(self):
        with pytest.raises(ValueError, match="as_ only supports one attribute"):
            Attribute.define("a", "b", as_="x")

    def test_method_name_affixes(self):
        assert Attribute("id", source="user", prefix=True).method_name == "user_id"
        assert Attribute("id", source="user", suffix=True).method_name == "id_user"
        assert Attribute("id", prefix="the_", suffix="_value").method_name == "the_id_value"
        assert Attribute("id", as_="identifier", prefix=True).method_name == "identifier"

    def test_required_child_of_optional_parent(self):
        parent = Attribute("address", required=False, children=required("city"))
        assert not parent.children[0].is_required
        assert parent.children[0].source_name == "address"

    def test_registry(self):
        registry = AttributeRegistry().register(required("a"), Attribute("b"))
        assert [a.name for a in registry] == ["a", "b"]
        assert len(registry.dup().deregister("a")) == 1
        assert len(registry) == 2


# ── Resolution during execution ──────────────────────────────────────────


class TestResolution:
    """define_and_verify through a real task execution."""

    def test_required_and_optional(self):
        class CreateUser(Task):
            def work(self):
                self.context.user = {"email": self.email, "age": self.age}

        CreateUser.required("email", format=r"@", transform="lower")
        CreateUser.optional("age", types="integer", default=18)

        assert CreateUser.call(email="A@B.IO").context.user == {"email": "a@b.io", "age": 18}
        assert CreateUser.call(email="a@b.io", age="40").context.user == {"email": "a@b.io", "age": 40}

    def test_collects_all_errors(self):
        class CreateUser(Task):
            def work(self):
                pass

        CreateUser.required("email", format=r"@")
        CreateUser.required("age", types="integer", numeric={"min": 18})
        CreateUser.required("name")

        result = CreateUser.call(email="nope", age="12")

        assert result.is_failed
        assert result.metadata["errors"]["messages"] == {
            "email": ["is an invalid format"],
            "age": ["must be at least 18"],
            "name": ["must be accessible via the context source"],
        }

    def test_optional_none_skips_validation(self):
        class Search(Task):
            def work(self):
                self.context.found = self.query

        Search.optional("query", presence=True, length={"min": 3})
        assert Search.call().context.found is None

    def test_default_callable(self):
        class Search(Task):
            def work(self):
                self.context.found = self.limit

        Search.optional("limit", default=lambda task: 25)
        assert Search.call().context.found == 25

    def test_multiple_types_message(self):
        class Parse(Task):
            def work(self):
                pass

        Parse.required("value", types=["integer", "date"])
        result = Parse.call(value="soon")

        assert result.metadata["errors"]["messages"] == {
            "value": ["could not coerce into one of: integer, date"],
        }

    def test_multiple_types_first_wins(self):
        class Parse(Task):
            def work(self):
                self.context.parsed = self.value

        Parse.required("value", types=["integer", "string"])
        assert Parse.call(value="soon").context.parsed == "soon"
        assert Parse.call(value="12").context.parsed == 12

    def test_method_source(self):
        class Charge(Task):
            def work(self):
                self.context.charged = self.amount

            def payment(self):
                return {"amount": "9"}

        Charge.required("amount", source="payment", types=int)
        assert Charge.call().context.charged == 9

    def test_undefined_method_source(self):
        class Charge(Task):
            def work(self):
                pass

        Charge.required("amount", source="payment")
        result = Charge.call()

        assert result.metadata["errors"]["messages"] == {
            "amount": ["delegates to undefined method payment"],
        }

    def test_callable_source_and_transform(self):
        class Charge(Task):
            def work(self):
                self.context.currency = self.currency

        Charge.required("currency", source=lambda task: {"currency": "usd"}, transform=str.upper)
        assert Charge.call().context.currency == "USD"

    def test_nested_children(self):
        class Ship(Task):
            def work(self):
                self.context.label = f"{self.city} {self.zip}"

        Ship.required("address", types="hash", children=required("city") + optional("zip", default="00000"))

        assert Ship.call(address={"city": "Oslo"}).context.label == "Oslo 00000"

        result = Ship.call(address={"zip": "1"})
        assert result.metadata["errors"]["messages"] == {
            "city": ["must be accessible via the address source"],
        }

    def test_attribute_values_recorded(self):
        class Charge(Task):
            def work(self):
                pass

        Charge.required("amount", types="integer")
        result = Charge.call(amount="3")
        assert result.task.attributes == {"amount": 3}

    def test_name_clash(self):
        class Charge(Task):
            def work(self):
                pass

        Charge.required("logger")

        result = Charge.call(logger="x")
        assert result.is_failed
        assert result.reason.startswith("[AttributeDefinitionError]")
        assert result.reason.endswith("logger already defined")

        with pytest.raises(AttributeDefinitionError, match="logger already defined"):
            Charge.call_or_raise(logger="x")
