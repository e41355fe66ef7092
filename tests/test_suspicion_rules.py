from pyquiz.suspicion_detector import (
    NOT_FIRED,
    RULES,
    STANDARD,
    STRICT,
    Weight,
    check_boilerplate,
    check_comments,
    check_error_handling,
    check_indentation,
    check_length,
    check_line_count,
    check_string_features,
    check_structure,
    check_vocabulary,
)


BOILERPLATE = (
    "#!/usr/bin/env python\n"
    "# -*- coding: utf-8 -*-\n"
    "# Author: someone\n"
    "\n"
    "def main():\n"
    "    pass\n"
    "\n"
    "if __name__ == '__main__':\n"
    "    main()\n"
)


def test_weight_scaling_and_cap():
    assert Weight(base=20).score(7) == 20
    assert Weight(per_match=10, cap=40).score(3) == 30
    assert Weight(per_match=10, cap=40).score(9) == 40
    assert Weight(per_match=15).score(5) == 75


def test_every_rule_is_quiet_on_empty_input():
    for rule in RULES:
        assert rule('', STANDARD) == NOT_FIRED
        assert rule('', STRICT) == NOT_FIRED


def test_length_cutoffs():
    assert check_length('x' * 500, STANDARD) == NOT_FIRED
    result = check_length('x' * 501, STANDARD)
    assert result.score == 30
    assert '501 characters' in result.reason
    assert check_length('x' * 301, STRICT).score == 25


def test_line_count_only_in_strict_profile():
    code = 'x = 1\n' * 16
    assert check_line_count(code, STANDARD) == NOT_FIRED
    result = check_line_count(code, STRICT)
    assert result.score == 20
    assert '16 lines' in result.reason
    assert check_line_count('x = 1\n' * 15, STRICT) == NOT_FIRED


def test_blank_lines_do_not_count_as_lines():
    code = 'x = 1\n\n\n' * 10
    assert check_line_count(code, STRICT) == NOT_FIRED


def test_structure_threshold_is_exclusive():
    three = 'import a\nimport b\nimport c\n'
    assert check_structure(three, STANDARD) == NOT_FIRED
    result = check_structure(three + 'import d\n', STANDARD)
    assert result.score == 40
    assert '(4)' in result.reason
    assert result.flag == 'has_complex_structure'


def test_strict_structure_counts_decorators_and_generators():
    code = '@cache\nasync def load():\n    yield value\n'
    result = check_structure(code, STRICT)
    # decorator, async def, def, yield
    assert result.score == 40
    assert '(4)' in result.reason


def test_vocabulary_is_case_insensitive_and_lists_terms():
    result = check_vocabulary('ALGORITHM = 1', STANDARD)
    assert result.score == 20
    assert result.reason == 'Professional terminology used: algorithm'
    assert result.flag == 'has_professional_naming'


def test_strict_vocabulary_needs_three_terms():
    assert check_vocabulary('# recursion with caching', STRICT) == NOT_FIRED
    result = check_vocabulary('# recursion with caching and validation', STRICT)
    assert result.score == 30
    assert result.reason == 'Professional terminology used: recursion, caching, validation'


def test_comment_density():
    code = '# one\nx = 1\n# two\ny = 2\n# three\nz = 3\n# four\nprint(x)\n'
    result = check_comments(code, STANDARD)
    assert result.score == 25
    assert result.reason == 'Excessive comments (4 lines, 50%)'
    assert result.flag == 'has_excessive_comments'
    assert check_comments(code, STRICT).score == 25


def test_a_single_comment_is_fine():
    assert check_comments('# add\nx = 1', STANDARD) == NOT_FIRED
    assert check_comments('# a\n# b\n# c\nx = 1', STRICT) == NOT_FIRED


def test_indentation_needs_both_styles():
    assert check_indentation('if x:\n    a = 1\n    b = 2', STANDARD) == NOT_FIRED
    assert check_indentation('if x:\n\ta = 1\n\tb = 2', STANDARD) == NOT_FIRED
    assert check_indentation('if x:\n    a = 1\n\tb = 2', STANDARD).score == 15
    assert check_indentation('if x:\n    a = 1\n\tb = 2', STRICT).score == 20


def test_whitespace_only_lines_do_not_count_as_indentation():
    assert check_indentation('if x:\n\ta = 1\n    \n', STANDARD) == NOT_FIRED


def test_error_handling_density():
    code = "try:\n    x = 1\nexcept ValueError:\n    raise RuntimeError('x')\n"
    assert check_error_handling(code, STANDARD).score == 20
    assert check_error_handling(code, STRICT) == NOT_FIRED
    strict_code = code + "finally:\n    logging.info('done')\n"
    assert check_error_handling(strict_code, STRICT).score == 30


def test_string_formatting():
    code = 'print(f"{a}")\nprint("{}".format(b))\nprint("%d" % c)\n'
    result = check_string_features(code, STANDARD)
    assert result.score == 15
    assert result.reason == 'Heavy use of advanced string formatting (3)'
    assert result.flag == 'has_advanced_features'
    assert check_string_features(code, STRICT) == NOT_FIRED


def test_boilerplate_only_in_strict_profile():
    assert check_boilerplate(BOILERPLATE, STANDARD) == NOT_FIRED
    result = check_boilerplate(BOILERPLATE, STRICT)
    # shebang, encoding, author, def main(), entry-point guard
    assert result.score == 75
    assert '(5)' in result.reason
