import pytest

from testgen.counter import count_tests
from testgen.models import TestingFramework


class TestCountTests:
    """Tests for count_tests."""

    @pytest.mark.parametrize(
        "framework, code, expected",
        [
            ("jest", "describe('a', () => {\n  test('b', () => {});\n  it('c', () => {});\n});", 2),
            ("vitest", "test('a', () => {})\nit ('b', () => {})", 2),
            ("mocha", "describe('a', () => {\n  it('b', () => {});\n  it('c', () => {});\n});", 2),
            ("pytest", "def test_a():\n    pass\n\ndef test_b():\n    pass\n\ndef helper():\n    pass", 2),
            ("junit", "@Test\nvoid a() {}\n@Test\nvoid b() {}\n@BeforeEach\nvoid setUp() {}", 2),
            ("nunit", "[TestFixture]\npublic class T {\n  [Test]\n  public void A() {}\n}", 1),
            ("gtest", "TEST(Math, Add) {}\nTEST(Math, Sub) {}", 2),
            ("go-test", "func TestAdd(t *testing.T) {}\nfunc TestSub(t *testing.T) {}\nfunc helper() {}", 2),
            ("rust-test", "#[test]\nfn a() {}\n#[test]\nfn b() {}\n#[cfg(test)]", 2),
        ],
    )
    def test_counts_framework_markers(self, framework, code, expected):
        """Test that each framework's declaration marker is counted.

        Args:
            framework: Framework name.
            code: Test code sample.
            expected: Expected number of test cases.
        """
        assert count_tests(code, framework) == expected

    def test_jest_does_not_count_describe(self):
        """Test that describe blocks are not counted as jest test cases."""
        code = (
            "describe('add', () => {\n"
            "  test('adds', () => { expect(add(1,2)).toBe(3); });\n"
            "});"
        )
        assert count_tests(code, "jest") == 1

    def test_jest_requires_word_boundary(self):
        """Test that identifiers ending in ``it`` are not counted."""
        assert count_tests("submit(form);\nvisit(url);", "jest") == 0

    def test_mocha_does_not_count_test_calls(self):
        """Test that mocha only counts ``it`` calls."""
        assert count_tests("test('a', () => {});\nit('b', () => {});", "mocha") == 1

    @pytest.mark.parametrize("framework", [fw.value for fw in TestingFramework])
    def test_empty_code_counts_zero(self, framework):
        """Test that empty code yields zero for every framework.

        Args:
            framework: Framework name.
        """
        assert count_tests("", framework) == 0

    def test_unknown_framework_counts_zero(self):
        """Test that an unknown framework yields zero instead of failing."""
        assert count_tests("def test_a(): pass", "nose") == 0

    def test_accepts_enum_member(self):
        """Test that enum members work the same as strings."""
        assert count_tests("def test_a(): pass", TestingFramework.pytest) == 1
