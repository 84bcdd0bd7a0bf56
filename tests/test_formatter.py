"""Tests for the text report formatter."""

from direct_coverage_detector.formatter import GREEN, RED, RESET, format_report, grade
from direct_coverage_detector.models import DeclaredFunction, DiffOutput, Position


def make_function(name, filename, line):
    return DeclaredFunction(
        name=name,
        filename=filename,
        decl_position=Position(filename, line=line, column=1, offset=0),
    )


class TestFormatReport:
    def given_diff_with_missing_functions(self):
        self.diff = DiffOutput(
            declared_count=5,
            called_count=2,
            score=40,
            details={
                "b.go": [make_function("later", "b.go", 3)],
                "a.go": [
                    make_function("Client.Fetch", "a.go", 13),
                    make_function("run", "a.go", 21),
                ],
            },
            longest_name_length=12,
        )

    def given_perfect_diff(self):
        self.diff = DiffOutput(declared_count=4, called_count=4, score=100)

    def when_formatted(self, color=False):
        self.output = format_report(self.diff, color=color)

    def test_lists_files_in_order_with_aligned_names(self):
        """Files are sorted and names right-aligned to the longest."""
        self.given_diff_with_missing_functions()
        self.when_formatted()
        assert self.output.splitlines() == [
            "Functions without direct unit tests:",
            "in a.go:",
            "\tClient.Fetch on line 13",
            "\t         run on line 21",
            "in b.go:",
            "\t       later on line 3",
            "",
            "Grade: 40% (2/5 functions)",
        ]

    def test_perfect_score_prints_grade_only(self):
        """Without missing functions only the grade line is printed."""
        self.given_perfect_diff()
        self.when_formatted()
        assert self.output == "Grade: 100% (4/4 functions)"

    def test_colors_when_enabled(self):
        """Grades are colored by decile."""
        assert grade(100) == f"{GREEN}100%{RESET}"
        assert grade(42) == f"{RED}42%{RESET}"
        assert grade(42, color=False) == "42%"
