"""Render a diff report as terminal text."""

from direct_coverage_detector.models import DiffOutput

RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
WHITE = "\033[37m"
BOLD = "\033[1m"
RESET = "\033[0m"

# score // 10 -> color; anything lower is red
GRADE_COLORS = {
    6: MAGENTA,
    7: YELLOW,
    8: CYAN,
    9: BLUE,
    10: GREEN,
}


def colorize(text: str, *codes: str, enabled: bool = True) -> str:
    if not enabled:
        return text
    return f"{''.join(codes)}{text}{RESET}"


def pad(name: str, width: int) -> str:
    """Right-align a name to the given width."""
    return name.rjust(width)


def grade(score: int, color: bool = True) -> str:
    return colorize(f"{score}%", GRADE_COLORS.get(score // 10, RED), enabled=color)


def format_report(diff: DiffOutput, color: bool = False) -> str:
    """Format the functions without direct tests followed by the grade line.

    Only the grade line is produced when every function is called directly.
    """
    grade_line = (
        f"Grade: {grade(diff.score, color)} "
        f"({diff.called_count}/{diff.declared_count} functions)"
    )
    if not diff.details:
        return grade_line

    lines = ["Functions without direct unit tests:"]
    for filename in sorted(diff.details):
        lines.append(f"in {colorize(filename, WHITE, BOLD, enabled=color)}:")
        for function in diff.details[filename]:
            lines.append(
                f"\t{pad(function.name, diff.longest_name_length)} "
                f"on line {function.decl_position.line}"
            )
    lines.append("")
    lines.append(grade_line)
    return "\n".join(lines)
