"""Tests for taskline.task — construction, class settings and introspection."""

import pytest

from taskline import Context, Task, configure
from taskline.core.errors import FrozenError
from taskline.execution.chain import Chain
from taskline.middlewares import Runtime


class TestConstruction:
    """Task(context, **values)."""

    def test_builds_context_from_values(self):
        class Greet(Task):
            def work(self):
                pass

        task = Greet({"name": "ada"}, lang="en")
        assert isinstance(task.context, Context)
        assert task.context.to_dict() == {"name": "ada", "lang": "en"}

    def test_shares_given_context(self):
        class Greet(Task):
            def work(self):
                pass

        ctx = Context(name="ada")
        assert Greet(ctx).context is ctx

    def test_starts_in_detached_chain(self):
        class Greet(Task):
            def work(self):
                pass

        task = Greet()
        assert Chain.current() is None
        assert task.chain.results == [task.result]
        assert task.result.task is task
        assert task.errors.is_empty
        assert task.attributes == {}

    def test_instance_execute(self):
        class Greet(Task):
            def work(self):
                self.context.greeting = f"hello {self.context.name}"

        assert Greet(name="ada").execute().context.greeting == "hello ada"

    def test_frozen_after_execution(self):
        class Greet(Task):
            def work(self):
                pass

        result = Greet.call()
        with pytest.raises(FrozenError, match="cannot modify frozen Greet"):
            result.task.extra = 1


class TestTaskSettings:
    """Lazy per-class settings with inheritance."""

    def test_root_returns_global_defaults(self):
        configure(retries=4)
        assert Task.task_settings()["retries"] == 4

    def test_root_rejects_options(self):
        with pytest.raises(TypeError, match="cannot change settings on Task"):
            Task.task_settings(retries=1)

    def test_subclass_snapshot_of_configuration(self):
        configure(retries=2)

        class Sync(Task):
            pass

        assert Sync.task_settings()["retries"] == 2
        configure(retries=5)
        assert Sync.task_settings()["retries"] == 2

    def test_options_update_own_settings_only(self):
        class Parent(Task):
            pass

        class Child(Parent):
            pass

        Parent.task_settings(retries=1)
        Child.task_settings(retries=3, tags=["billing"])

        assert Parent.task_settings()["retries"] == 1
        assert Child.task_settings()["retries"] == 3
        assert Parent.task_settings()["tags"] == []

    def test_child_copies_parent_at_first_access(self):
        class Parent(Task):
            pass

        Parent.task_settings(tags=["core"])

        class Child(Parent):
            pass

        Child.task_settings()["tags"].append("extra")

        assert Parent.task_settings()["tags"] == ["core"]
        assert Child.task_settings()["tags"] == ["core", "extra"]

    def test_registries_not_shared(self):
        class Parent(Task):
            pass

        class Child(Parent):
            pass

        Child.register("middleware", Runtime)

        assert len(Child.task_settings()["middlewares"]) == 1
        assert len(Parent.task_settings()["middlewares"]) == 0


class TestRegistration:
    """register / deregister routing."""

    def test_coercion_and_validator(self):
        class Pay(Task):
            def work(self):
                self.context.cents = self.amount

        Pay.register("coercion", "cents", lambda value, options: int(round(float(value) * 100)))
        Pay.register("validator", "positive", lambda value, options: None)
        Pay.required("amount", types="cents", positive=True)

        assert Pay.call(amount="1.25").context.cents == 125

    def test_deregister_coercion(self):
        class Pay(Task):
            def work(self):
                pass

        Pay.deregister("coercion", "integer")
        Pay.required("amount", types="integer")
        result = Pay.call(amount="1")

        assert result.is_failed
        assert result.metadata["errors"]["messages"]["amount"] == ["unknown integer coercion type"]

    def test_deregister_attribute(self):
        class Pay(Task):
            def work(self):
                pass

        Pay.required("amount", "currency")
        Pay.deregister("attribute", "currency")

        assert Pay.call(amount=1).is_success

    def test_base_class_rejects_registration(self):
        with pytest.raises(TypeError, match="subclass it"):
            Task.required("amount")


class TestIntrospection:
    """to_dict, repr, logger and tags."""

    def test_to_dict(self):
        class Greet(Task):
            pass

        Greet.task_settings(tags=["greeting"])
        task = Greet()
        assert task.to_dict() == {
            "index": 0,
            "chain_id": task.chain.id,
            "type": "Task",
            "class": type(task).__qualname__,
            "id": task.id,
            "tags": ["greeting"],
        }

    def test_repr(self):
        class Greet(Task):
            pass

        task = Greet()
        assert repr(task) == f"<Greet id={task.id}>"

    def test_default_logger_named_after_class(self):
        class Greet(Task):
            pass

        assert Greet().logger is not None

    def test_logger_setting_wins(self):
        sentinel = object()

        class Greet(Task):
            pass

        Greet.task_settings(logger=sentinel)
        assert Greet().logger is sentinel

    def test_ids_unique(self):
        class Greet(Task):
            pass

        assert Greet().id != Greet().id
