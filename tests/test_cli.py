from mini_analyzer import main


def test_clean_file(tmp_path, capsys):
	source = tmp_path / "loop.txt"
	source.write_text("int x = 0;\ndo { x = x + 1; } while (x == 10);\n", encoding="utf-8")
	assert main([str(source)]) == 0
	out = capsys.readouterr().out
	assert "int x" in out
	assert "Tokens: 21 | Errors: 0" in out


def test_file_with_errors(tmp_path, capsys):
	source = tmp_path / "bad.txt"
	source.write_text("int a = 1;\nb = a;\n", encoding="utf-8")
	assert main([str(source)]) == 1
	out = capsys.readouterr().out
	assert "[SEMANTIC] line 2, column 1: Variable 'b' used before declared" in out


def test_usage(capsys):
	assert main([]) == 1
	assert "Usage" in capsys.readouterr().out


def test_missing_file(tmp_path, capsys):
	assert main([str(tmp_path / "nope.txt")]) == 1
	assert "Cannot read" in capsys.readouterr().err
