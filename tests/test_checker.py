import pytest

from mini_analyzer import (
	AnalysisEngine,
	Assignment,
	NumberLiteral,
	Program,
	SemanticChecker,
	SymbolTable,
	check,
	parse,
	scan,
)


def analyze(source, **kwargs):
	program, syntax_errors = parse(scan(source))
	assert syntax_errors == []
	return check(program, **kwargs)


def test_redeclaration_is_reported_once():
	table, errors = analyze("int a = 10; int a = 5;")
	assert len(errors) == 1
	assert "already declared" in errors[0].message
	assert "'a'" in errors[0].message
	assert len(table) == 1
	assert table.lookup("a").type_name == "int"


def test_undeclared_assignment_target():
	table, errors = analyze("b = 1;")
	assert len(errors) == 1
	assert errors[0].message == "Variable 'b' used before declared"
	assert (errors[0].line, errors[0].column) == (1, 1)
	assert len(table) == 0


def test_loop_program_is_clean():
	table, errors = analyze("int x = 0; do { x = x + 1; } while (x == 10);")
	assert errors == []
	assert "x" in table


def test_undeclared_operands_in_order():
	_, errors = analyze("int a = b * c;")
	assert [e.message for e in errors] == [
		"Variable 'b' used before declared",
		"Variable 'c' used before declared",
	]
	assert [(e.line, e.column) for e in errors] == [(1, 9), (1, 13)]


def test_declarations_are_collected_before_uses():
	_, errors = analyze("y = 2; int y = 1;")
	assert errors == []


def test_numbers_never_need_resolution():
	_, errors = analyze("int a = 1 + 2; a = 3 * 4;")
	assert errors == []


def test_loop_body_and_condition_are_checked():
	_, errors = analyze("do { n = m + 1; } while (k == 1);")
	assert [e.message for e in errors] == [
		"Variable 'n' used before declared",
		"Variable 'm' used before declared",
		"Variable 'k' used before declared",
	]


def test_x_is_implicitly_declared_by_default():
	_, errors = analyze("x = 1; do { x = x + 1; } while (x == 3);")
	assert errors == []


def test_strict_checker_reports_x():
	_, errors = analyze("x = 1; do { x = x + 1; } while (x == 3);", implicit_names=())
	assert len(errors) == 4
	assert all("'x'" in e.message for e in errors)


def test_symbols_carry_no_value_or_position():
	table, _ = analyze("int a = 7;")
	symbol = table.lookup("a")
	assert symbol.value is None
	assert (symbol.line, symbol.column) == (0, 0)


def test_unknown_statement_raises():
	with pytest.raises(TypeError):
		SemanticChecker().check(Program(statements=("junk",)))


def test_unknown_expression_raises():
	with pytest.raises(TypeError):
		SemanticChecker().check(Program(statements=(Assignment("x", "junk"),)))


def test_symbol_table_update_and_listing():
	table = SymbolTable()
	table.define("a", "int")
	assert table.update("a", 42)
	assert not table.update("missing", 1)
	assert table.lookup("a").value == 42
	assert [s.name for s in table.symbols()] == ["a"]
	assert table.lookup("missing") is None


def test_check_is_deterministic():
	source = "int a = 1; int a = 2; b = a;"
	first_table, first_errors = analyze(source)
	second_table, second_errors = analyze(source)
	assert first_errors == second_errors
	assert first_table.symbols() == second_table.symbols()


def test_engine_combines_all_stages():
	art = AnalysisEngine().analyze("int a = 1; b = a; @")
	assert [t.literal for t in art.tokens][-2:] == ["@", ""]
	assert [d.origin for d in art.diagnostics] == ["syntax", "semantic"]
	assert "a" in art.symbols
	assert art.program.statements[0].value == NumberLiteral("1")
	assert art.duration_ms >= 0
