from typing import List, Sequence

import numpy as np


def box_area(box: Sequence[float]) -> float:
    x1, y1, x2, y2 = box
    return float(max(0.0, x2 - x1) * max(0.0, y2 - y1))


def box_iou(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Intersection-over-union of two (x1, y1, x2, y2) boxes.
    Returns 0.0 when the union is empty.
    """
    ix1 = max(a[0], b[0])
    iy1 = max(a[1], b[1])
    ix2 = min(a[2], b[2])
    iy2 = min(a[3], b[3])

    inter = float(max(0, ix2 - ix1) * max(0, iy2 - iy1))
    union = box_area(a) + box_area(b) - inter
    if union <= 0.0:
        return 0.0
    return inter / union


def non_max_suppression(
    boxes: Sequence[Sequence[float]],
    scores: Sequence[float],
    iou_threshold: float,
) -> List[int]:
    """
    Greedy class-agnostic NMS.

    Candidates are visited by descending score (equal scores keep their
    input order). Each accepted box removes every remaining box whose IoU
    with it is >= iou_threshold.

    Returns:
        Indices of kept boxes in acceptance order.
    """
    if len(boxes) != len(scores):
        raise ValueError(f"boxes ({len(boxes)}) and scores ({len(scores)}) differ in length")

    order = np.argsort(-np.asarray(scores, dtype=np.float64), kind="stable").tolist()
    boxes = [tuple(float(v) for v in box) for box in boxes]

    keep: List[int] = []
    while order:
        best = order[0]
        keep.append(best)
        order = [i for i in order[1:] if box_iou(boxes[best], boxes[i]) < iou_threshold]

    return keep
