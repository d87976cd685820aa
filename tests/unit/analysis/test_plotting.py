import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from exam_analysis.analysis import analyze_exam  # noqa: E402
from exam_analysis.analysis.plotting import (  # noqa: E402
    plot_item_map,
    plot_similarity_heatmap,
)
from exam_analysis.core.data_models import (  # noqa: E402
    QuestionResponse,
    StudentResponse,
)


def _student(student_id: str, correct: list[bool]) -> StudentResponse:
    return StudentResponse(
        student_id=student_id,
        variant_code="A",
        question_responses=tuple(
            QuestionResponse(
                question_id=f"q{j}",
                student_answer="A" if ok else "B",
                is_correct=ok,
                points=float(ok),
                max_points=1,
            )
            for j, ok in enumerate(correct)
        ),
        total_score=float(sum(correct)),
        max_possible_score=float(len(correct)),
    )


def test_plot_item_map() -> None:
    result = analyze_exam(
        [],
        [
            _student("s1", [True, True]),
            _student("s2", [True, False]),
            _student("s3", [False, False]),
        ],
    )
    fig = plot_item_map(result)
    assert isinstance(fig, Figure)
    assert fig.axes[0].get_title() == "Item Map: Unknown Exam"
    plt.close(fig)


def test_plot_similarity_heatmap() -> None:
    matrix = {
        "s1": {"s1": 1.0, "s2": 0.4},
        "s2": {"s1": 0.4, "s2": 1.0},
    }
    fig = plot_similarity_heatmap(matrix, "Students")
    assert isinstance(fig, Figure)
    assert fig.axes[0].get_title() == "Students"
    plt.close(fig)
