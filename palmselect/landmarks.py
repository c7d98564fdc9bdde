"""
Finger counting from MediaPipe hand landmarks.
"""
from .types import Landmark, Landmarks

# MediaPipe hand landmark indices
WRIST = 0
THUMB_MCP, THUMB_IP, THUMB_TIP = 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_TIP = 5, 6, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_TIP = 9, 10, 12
RING_MCP, RING_PIP, RING_TIP = 13, 14, 16
PINKY_MCP, PINKY_PIP, PINKY_TIP = 17, 18, 20

# (tip, pip, mcp) for index, middle, ring, pinky
FINGER_JOINTS = [
    (INDEX_TIP, INDEX_PIP, INDEX_MCP),
    (MIDDLE_TIP, MIDDLE_PIP, MIDDLE_MCP),
    (RING_TIP, RING_PIP, RING_MCP),
    (PINKY_TIP, PINKY_PIP, PINKY_MCP),
]

DEFAULT_THUMB_DISTANCE = 0.12
FULL_PALM_MIN_FINGERS = 4


def palm_center_x(landmarks: Landmarks) -> float:
    """Horizontal palm center: mean x of the wrist, index MCP and pinky MCP."""
    return (landmarks[WRIST][0] + landmarks[INDEX_MCP][0] + landmarks[PINKY_MCP][0]) / 3


def finger_extended(tip: Landmark, pip: Landmark, mcp: Landmark) -> bool:
    """A finger is extended when tip, PIP and MCP rise monotonically (image y grows downward)."""
    return tip[1] < pip[1] < mcp[1]


def thumb_extended(landmarks: Landmarks, distance_threshold: float = DEFAULT_THUMB_DISTANCE) -> bool:
    """
    Check whether the thumb is extended.

    The thumb tip must sit far enough from the palm center horizontally and
    the tip, IP and MCP joints must rise monotonically.

    Args:
        landmarks: List of 21 hand landmarks
        distance_threshold: Minimum horizontal distance in normalized units

    Returns:
        True if both conditions hold
    """
    distance = abs(landmarks[THUMB_TIP][0] - palm_center_x(landmarks))
    vertical = finger_extended(landmarks[THUMB_TIP], landmarks[THUMB_IP], landmarks[THUMB_MCP])
    return distance > distance_threshold and vertical


def count_fingers(landmarks: Landmarks,
                  thumb_distance_threshold: float = DEFAULT_THUMB_DISTANCE,
                  closed_fist_short_circuit: bool = False) -> int:
    """
    Count the number of extended fingers.

    Args:
        landmarks: List of 21 hand landmarks
        thumb_distance_threshold: Minimum horizontal thumb-to-palm distance
        closed_fist_short_circuit: Report 0 without checking the thumb when no
            other finger is extended

    Returns:
        Number of extended fingers (0-5)
    """
    count = sum(
        1 for tip, pip, mcp in FINGER_JOINTS
        if finger_extended(landmarks[tip], landmarks[pip], landmarks[mcp])
    )

    if count == 0 and closed_fist_short_circuit:
        return 0

    if thumb_extended(landmarks, thumb_distance_threshold):
        count += 1

    return count


def is_full_palm(finger_count: int) -> bool:
    return finger_count >= FULL_PALM_MIN_FINGERS


def landmarks_in_frame(landmarks: Landmarks, margin: float = 0.0) -> bool:
    """True when every landmark lies inside the normalized image bounds, widened by ``margin``."""
    low, high = -margin, 1.0 + margin
    return all(low <= point[0] <= high and low <= point[1] <= high for point in landmarks)
