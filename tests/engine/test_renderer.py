"""
Tests for the render engine
"""

import pytest

from minipoml import render_poml
from minipoml.engine import DictLoader, Renderer
from minipoml.errors import EvaluatorError, ParserError, RendererError
from minipoml.renderers import DebugTagRenderer


class TestRender:
    """Tests for basic rendering"""

    def test_hello_world(self):
        output = render_poml('<poml><p>Hello, {{name}}!</p></poml>', {'name': 'world'})
        assert output == 'Hello, world!\n\n'

    def test_text_only_document(self):
        assert render_poml('Hello, {{ name }}!', {'name': 'world'}) == 'Hello, world!'

    def test_whitespace_renders_as_single_space(self, debug_renderer):
        output = render_poml('<poml><b>a</b>\n   <i>b</i></poml>', tag_renderer=debug_renderer)
        assert output == '<poml><b>a</b> <i>b</i></poml>'

    def test_attributes_are_interpolated(self, debug_renderer):
        output = render_poml('<p id="n-{{ 1 + 1 }}">x</p>', tag_renderer=debug_renderer)
        assert output == '<poml><p id="n-2">x</p></poml>'

    def test_parser_errors_propagate(self):
        with pytest.raises(ParserError):
            render_poml('<poml><p></poml>')

    def test_unknown_tag(self):
        with pytest.raises(RendererError) as exc_info:
            render_poml('<foo>x</foo>')
        assert 'Unknown tag: <foo>' in str(exc_info.value)

    def test_create_from_doc_and_variables(self):
        renderer = Renderer.create_from_doc_and_variables('<p>{{ a }}</p>', {'a': 1})
        assert renderer.render() == '1\n\n'

    def test_scope_stack_is_restored_after_error(self):
        renderer = Renderer.create_from_doc_and_variables('<poml><p>{{ 1 / 0 }}</p></poml>')
        with pytest.raises(EvaluatorError):
            renderer.render()
        assert renderer.context.depth == 1


class TestIf:
    """Tests for the `if` attribute"""

    def test_falsy_condition(self):
        assert render_poml('<p if="{{ 0 }}">X</p>') == ''

    def test_truthy_condition(self):
        assert render_poml('<p if="{{ 1 }}">X</p>') == 'X\n\n'

    @pytest.mark.parametrize('condition', ['false', 'null', '', 'NaN', '0', ' 0 ', '0.0', '-0', '0.00'])
    def test_false_texts(self, condition):
        assert render_poml(f'<p if="{condition}">X</p>') == ''

    @pytest.mark.parametrize('expression', ['0.0', '1 - 1.0', '-0.0', 'price - 2.5'])
    def test_float_zero_condition(self, expression):
        assert render_poml(f'<p if="{{{{ {expression} }}}}">X</p>', {'price': 2.5}) == ''

    def test_nonzero_float_condition(self):
        assert render_poml('<p if="{{ 0.5 }}">X</p>') == 'X\n\n'

    def test_expression_condition(self):
        doc = '<poml><p if="{{ count > 2 }}">many</p><p if="{{ count > 5 }}">lots</p></poml>'
        assert render_poml(doc, {'count': 3}) == 'many\n\n'

    def test_falsy_condition_skips_children(self):
        # The children would fail to evaluate
        assert render_poml('<p if="false">{{ 1 / 0 }}</p>') == ''

    def test_if_with_for(self):
        with pytest.raises(RendererError):
            render_poml('<p if="1" for="x in [1]">{{ x }}</p>')


class TestFor:
    """Tests for the `for` attribute"""

    def test_decimal_list(self):
        doc = '<list listStyle="decimal"><item for="v in [1,2,3]">{{v}}</item></list>'
        assert render_poml(doc) == '1. 1\n2. 2\n3. 3\n\n'

    def test_loop_variable(self):
        doc = '<p for="n in names">{{ loop.index }}={{ n }} {{ loop.first }} {{ loop.last }} {{ loop.length }}</p>'
        output = render_poml(doc, {'names': ['a', 'b']})
        assert output == '0=a true false 2\n\n1=b false true 2\n\n'

    def test_range_from_variable_path(self):
        doc = '<p for="tag in user.tags">{{ tag }}</p>'
        assert render_poml(doc, {'user': {'tags': ['x', 'y']}}) == 'x\n\ny\n\n'

    def test_empty_range(self):
        assert render_poml('<p for="x in []">{{ x }}</p>') == ''

    def test_attributes_per_iteration(self, debug_renderer):
        doc = '<poml><p for="x in [1,2]" id="item-{{x}}">{{x}}</p></poml>'
        output = render_poml(doc, tag_renderer=debug_renderer)
        assert output == '<poml><p id="item-1">1</p><p id="item-2">2</p></poml>'

    def test_loop_scope_is_popped(self):
        doc = '<poml><p for="x in [1]">{{ x }}</p><p>{{ x }}</p></poml>'
        assert render_poml(doc) == '1\n\nnull\n\n'

    def test_loop_variable_shadows_outer(self):
        doc = "<poml><p for=\"name in ['a']\">{{ name }}</p><p>{{ name }}</p></poml>"
        assert render_poml(doc, {'name': 'outer'}) == 'a\n\nouter\n\n'

    def test_range_must_be_array(self):
        with pytest.raises(RendererError) as exc_info:
            render_poml('<p for="x in 5">{{ x }}</p>')
        assert 'not an array' in str(exc_info.value)

    def test_malformed_for(self):
        with pytest.raises(RendererError):
            render_poml('<p for="x of items">{{ x }}</p>')

    def test_invalid_loop_variable(self):
        with pytest.raises(RendererError):
            render_poml('<p for="1x in [1]">{{ x }}</p>')


class TestLet:
    """Tests for <let>"""

    def test_let_value(self):
        assert render_poml('<poml><let name="x" value="world"/>Hello {{ x }}</poml>') == 'Hello world'

    def test_scope_shadowing(self):
        doc = (
            '<poml><let name="x" value="outer"/>'
            '<p><let name="x" value="inner"/>{{x}}</p>'
            '<p>{{x}}</p></poml>'
        )
        assert render_poml(doc) == 'inner\n\nouter\n\n'

    def test_let_does_not_leak_into_base_scope(self):
        renderer = Renderer.create_from_doc_and_variables('<poml><let name="x" value="1"/></poml>')
        assert renderer.render() == ''
        assert renderer.context.get_value('x') is None

    def test_typed_values(self):
        doc = (
            '<poml>'
            '<let name="n" value="42" type="integer"/>'
            '<let name="f" value="2.5" type="number"/>'
            '<let name="b" value="false" type="boolean"/>'
            '<let name="arr" value="[1, 2]" type="array"/>'
            '<let name="s" value="007" type="string"/>'
            '{{ n + 1 }} {{ f * 2 }} {{ b }} {{ arr[1] }} {{ s }}'
            '</poml>'
        )
        assert render_poml(doc) == '43 5 false 2 007'

    def test_inferred_types(self):
        doc = (
            '<poml>'
            '<let name="b" value="true"/>'
            '<let name="i" value="7"/>'
            '<let name="f" value="0.5"/>'
            '<let name="a" value="[1]"/>'
            '<let name="s" value="plain"/>'
            '{{ b === true }} {{ i === 7 }} {{ f === 0.5 }} {{ a === [1] }} {{ s }}'
            '</poml>'
        )
        assert render_poml(doc) == 'true true true true plain'

    def test_object_value(self):
        doc = '<poml><let name="o" value="{#quot;a#quot;: {#quot;b#quot;: 3}}" type="object"/>{{ o.a.b }}</poml>'
        assert render_poml(doc) == '3'

    def test_let_without_name_merges_object(self):
        doc = '<poml><let value="{#quot;a#quot;: 1, #quot;b#quot;: #quot;x#quot;}"/>{{ a }}{{ b }}</poml>'
        assert render_poml(doc) == '1x'

    def test_let_without_name_requires_object(self):
        with pytest.raises(RendererError):
            render_poml('<let value="[1]"/>')

    def test_value_from_children(self):
        doc = '<poml><let name="greeting">Hi {{ name }}</let>{{ greeting }}!</poml>'
        assert render_poml(doc, {'name': 'world'}) == 'Hi world!'

    def test_value_from_src(self):
        loader = DictLoader({'data.json': '{"title": "Report"}'})
        doc = '<poml><let name="data" src="data.json"/>{{ data.title }}</poml>'
        assert render_poml(doc, loader=loader) == 'Report'

    def test_value_expression_in_attribute(self):
        doc = '<poml><let name="total" value="{{ price * 2 }}"/>{{ total }}</poml>'
        assert render_poml(doc, {'price': 2}) == '4'

    def test_no_value(self):
        with pytest.raises(RendererError):
            render_poml('<let name="x"/>')

    def test_more_than_one_value(self):
        with pytest.raises(RendererError):
            render_poml('<let name="x" value="1">2</let>')

    def test_typed_parse_failure(self):
        with pytest.raises(RendererError):
            render_poml('<let name="x" value="abc" type="integer"/>')

    def test_unknown_type(self):
        with pytest.raises(RendererError) as exc_info:
            render_poml('<let name="x" value="1" type="decimal"/>')
        assert 'Unknown type' in str(exc_info.value)


class TestInclude:
    """Tests for <include>"""

    def test_include(self):
        loader = DictLoader({'header.poml': '<p>Hi {{ name }}</p>'})
        doc = '<poml><include src="header.poml"/><p>Body</p></poml>'
        assert render_poml(doc, {'name': 'world'}, loader=loader) == 'Hi world\n\nBody\n\n'

    def test_include_sees_current_scope(self):
        loader = DictLoader({'item.poml': '{{ x }}'})
        doc = '<poml><let name="x" value="5"/><include src="item.poml"/></poml>'
        assert render_poml(doc, loader=loader) == '5'

    def test_include_does_not_leak_bindings(self):
        loader = DictLoader({'a.poml': '<poml><let name="name" value="changed"/>{{ name }}</poml>'})
        doc = '<poml><include src="a.poml"/>{{ name }}</poml>'
        assert render_poml(doc, {'name': 'world'}, loader=loader) == 'changedworld'

    def test_include_src_is_interpolated(self):
        loader = DictLoader({'part-2.poml': 'two'})
        doc = '<poml><include src="part-{{ n }}.poml"/></poml>'
        assert render_poml(doc, {'n': 2}, loader=loader) == 'two'

    def test_missing_src(self):
        with pytest.raises(RendererError) as exc_info:
            render_poml('<include/>', loader=DictLoader({}))
        assert '`src` attribute not found' in str(exc_info.value)

    def test_missing_file(self):
        with pytest.raises(RendererError):
            render_poml('<include src="missing.poml"/>', loader=DictLoader({}))

    def test_circular_include(self):
        loader = DictLoader({
            'a.poml': '<include src="b.poml"/>',
            'b.poml': '<include src="a.poml"/>',
        })
        with pytest.raises(RendererError) as exc_info:
            render_poml('<include src="a.poml"/>', loader=loader)
        assert 'Circular include' in str(exc_info.value)

    def test_include_depth_limit(self):
        loader = DictLoader({
            'a.poml': '<include src="b.poml"/>',
            'b.poml': '<include src="c.poml"/>',
            'c.poml': 'deep',
        })
        renderer = Renderer.create_from_doc_and_variables(
            '<include src="a.poml"/>',
            loader=loader,
            max_include_depth=2
        )
        with pytest.raises(RendererError) as exc_info:
            renderer.render()
        assert 'depth' in str(exc_info.value)

    def test_include_uses_a_copy_of_the_tag_renderer(self):
        loader = DictLoader({'a.poml': '<b>x</b>'})
        output = render_poml('<include src="a.poml"/>', loader=loader, tag_renderer=DebugTagRenderer())
        assert output == '<poml><poml><b>x</b></poml></poml>'
