import math

import numpy as np

from generalqp.active_set import ActiveSetData
from generalqp.trace import IterationInfo, format_header, format_row, snapshot


def _data() -> ActiveSetData:
    P = 2.0 * np.eye(2)
    q = np.array([-2.0, -5.0])
    A = np.array([[-1.0, 2.0], [1.0, 2.0], [1.0, -2.0], [-1.0, 0.0], [0.0, -1.0]])
    b = np.array([2.0, 6.0, 2.0, 0.0, 0.0])
    return ActiveSetData(P, q, A, b, np.array([2.0, 0.0]))


def test_snapshot_without_diagnostics():
    data = _data()
    info = snapshot(data)
    assert info.iteration == 0
    assert info.objective == data.objective()
    assert info.radius == 2.0
    assert math.isnan(info.residual)
    assert info.curvature == 1.0
    assert info.working_set_size == 0
    assert info.artificial_constraints == 0
    assert info.ldl_residual is None


def test_snapshot_with_diagnostics_after_iteration():
    data = _data()
    data.iterate()
    info = snapshot(data, diagnostics=True)
    assert info.working_set_size == 1
    assert info.ldl_residual < 1e-12
    assert info.orthogonality_residual < 1e-12
    assert info.qr_residual < 1e-12


def test_format_row_marks_missing_residual():
    info = IterationInfo(
        iteration=3,
        objective=-1.5,
        infeasibility=0.0,
        radius=1.0,
        residual=math.nan,
        curvature=1.0,
        working_set_size=2,
        artificial_constraints=1,
    )
    row = format_row(info)
    assert row.startswith("3 ")
    assert "nan" in row
    assert row.endswith("2/1")


def test_header_with_factorization_columns():
    assert "Objective" in format_header()
    assert "||Q*Q'-I||" in format_header(diagnostics=True)
    assert "||Q*Q'-I||" not in format_header()
