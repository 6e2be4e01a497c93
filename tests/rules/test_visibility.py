# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the ExplicitVisibility rule."""

from __future__ import annotations

from rubyqa.rules.visibility import ExplicitVisibility

MODIFIER = {"EnforcedStyle": "modifier"}
GROUPED = {"EnforcedStyle": "grouped"}


def test_standalone_private_reported_in_modifier_style(inspect_source) -> None:
    source = """
    class Foo
      def public_method
      end

      private

      def secret_method
      end
    end
    """

    (offense,) = inspect_source(ExplicitVisibility(), source, MODIFIER)

    assert offense.message == "Use explicit visibility. Place `private` before the method definition."
    assert (offense.line, offense.column) == (5, 2)


def test_standalone_protected_reported_in_modifier_style(inspect_source) -> None:
    source = """
    class Foo
      protected

      def protected_method
      end
    end
    """

    (offense,) = inspect_source(ExplicitVisibility(), source, MODIFIER)

    assert offense.message == "Use explicit visibility. Place `protected` before the method definition."


def test_modifier_correction_prefixes_every_method(autocorrect_source) -> None:
    source = """
    class Foo
      private

      def secret_method
      end

      def another_secret
      end
    end
    """

    assert autocorrect_source(ExplicitVisibility(), source, MODIFIER) == (
        "class Foo\n"
        "  private def secret_method\n"
        "  end\n"
        "\n"
        "  private def another_secret\n"
        "  end\n"
        "end\n"
    )


def test_modifier_style_accepts_modifiers_and_symbol_arguments(inspect_source) -> None:
    source = """
    class Foo
      def public_method
      end

      private def secret_method
      end

      private :some_method
      private_class_method :class_method
    end
    """

    assert inspect_source(ExplicitVisibility(), source, MODIFIER) == []


def test_trailing_keyword_without_methods_is_ignored(inspect_source) -> None:
    source = """
    class Foo
      def bar; end

      private
    end
    """

    assert inspect_source(ExplicitVisibility(), source, MODIFIER) == []


def test_inline_modifier_reported_in_grouped_style(inspect_source) -> None:
    source = """
    class Foo
      private def secret_method
      end
    end
    """

    (offense,) = inspect_source(ExplicitVisibility(), source, GROUPED)

    assert offense.message == "Use grouped visibility. Move method to `private` section."
    assert (offense.line, offense.column) == (2, 2)


def test_grouped_is_the_default_style(inspect_source) -> None:
    source = """
    class Foo
      private def secret_method
      end
    end
    """

    assert len(inspect_source(ExplicitVisibility(), source)) == 1


def test_grouped_correction_creates_a_section(autocorrect_source) -> None:
    source = """
    class Foo
      def public_method
      end

      private def secret_method
      end
    end
    """

    assert autocorrect_source(ExplicitVisibility(), source, GROUPED) == (
        "class Foo\n"
        "  def public_method\n"
        "  end\n"
        "\n"
        "\n"
        "  private\n"
        "\n"
        "  def secret_method\n"
        "  end\n"
        "end\n"
    )


def test_grouped_correction_moves_into_existing_section(autocorrect_source) -> None:
    source = """
    class Foo
      def public_method
      end

      private

      def existing_private
      end

      private def another_private
      end
    end
    """

    assert autocorrect_source(ExplicitVisibility(), source, GROUPED) == (
        "class Foo\n"
        "  def public_method\n"
        "  end\n"
        "\n"
        "  private\n"
        "\n"
        "  def existing_private\n"
        "  end\n"
        "\n"
        "  def another_private\n"
        "  end\n"
        "end\n"
    )


def test_grouped_style_accepts_sections_and_public_modifier(inspect_source) -> None:
    source = """
    class Foo
      public def visible
      end

      private

      def secret_method
      end
    end
    """

    assert inspect_source(ExplicitVisibility(), source, GROUPED) == []
