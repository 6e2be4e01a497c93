# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the MethodParameterShadowing rule."""

from __future__ import annotations

import pytest

from rubyqa.rules.parameter_shadowing import MethodParameterShadowing


def _names(offenses) -> list[str]:
    return [offense.message.split("`")[1] for offense in offenses]


def test_shadowing_positional_parameter(inspect_source) -> None:
    source = """
    class User
      def initialize(name)
        @name = name
      end

      def update(name)
        @name = name
      end
    end
    """

    (offense,) = inspect_source(MethodParameterShadowing(), source)

    assert offense.message == "Parameter `name` shadows instance variable `@name`. Use a different name."
    assert (offense.line, offense.column) == (6, 13)


def test_every_shadowing_parameter_is_reported(inspect_source) -> None:
    source = """
    class User
      def initialize(name, email)
        @name = name
        @email = email
      end

      def update(name, email, role)
        @name = name
      end
    end
    """

    assert _names(inspect_source(MethodParameterShadowing(), source)) == ["name", "email"]


@pytest.mark.parametrize("signature", ["update(name:)", "update(name: nil)", 'update(name = "default")'])
def test_keyword_and_optional_parameters(inspect_source, signature: str) -> None:
    source = f"""
    class User
      attr_accessor :name

      def {signature}
        @name = name
      end
    end
    """

    assert _names(inspect_source(MethodParameterShadowing(), source)) == ["name"]


def test_splat_and_block_parameters_are_ignored(inspect_source) -> None:
    source = """
    class Runner
      def call(*args, **options, &block)
        @args = args
        @options = options
        @block = block
      end
    end
    """

    assert inspect_source(MethodParameterShadowing(), source) == []


def test_exempt_methods(inspect_source) -> None:
    source = """
    module Updateable
      def setup(name)
        @name = name
      end

      def rename(name)
        @name = name
      end
    end
    """

    assert _names(inspect_source(MethodParameterShadowing(), source)) == ["name"]
    assert inspect_source(MethodParameterShadowing(), source, {"ExemptMethods": ["setup", "rename"]}) == []


def test_no_offense_without_matching_instance_variable(inspect_source) -> None:
    source = """
    class User
      def update(new_name)
        @name = new_name
      end

      def greet(name)
        puts name
      end
    end
    """

    assert inspect_source(MethodParameterShadowing(), source) == []


def test_top_level_methods_are_ignored(inspect_source) -> None:
    source = """
    @name = "global"

    def greet(name)
      puts name
    end
    """

    assert inspect_source(MethodParameterShadowing(), source) == []
