"""
Test cases for finger counting from synthetic landmarks.
"""
import unittest
import itertools
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from palmselect.landmarks import (
    count_fingers,
    finger_extended,
    is_full_palm,
    landmarks_in_frame,
    palm_center_x,
    thumb_extended,
    THUMB_TIP,
)
from synthetic_hands import hand_showing, make_hand


class TestFingerExtended(unittest.TestCase):
    """Test the per-finger straightening rule."""
    
    def test_monotonic_rise_is_extended(self):
        """Tip above PIP above MCP counts as extended."""
        self.assertTrue(finger_extended((0.5, 0.3), (0.5, 0.4), (0.5, 0.5)))
    
    def test_tip_below_pip_is_curled(self):
        """A tip below its PIP counts as curled."""
        self.assertFalse(finger_extended((0.5, 0.45), (0.5, 0.4), (0.5, 0.5)))
    
    def test_equal_heights_are_not_extended(self):
        """The comparison is strict."""
        self.assertFalse(finger_extended((0.5, 0.4), (0.5, 0.4), (0.5, 0.5)))


class TestThumb(unittest.TestCase):
    """Test thumb extension combining distance and vertical order."""
    
    def test_palm_center_uses_wrist_index_and_pinky_mcp(self):
        """Palm center is the mean x of wrist, index MCP and pinky MCP."""
        landmarks = make_hand()
        self.assertAlmostEqual(palm_center_x(landmarks), (0.50 + 0.42 + 0.66) / 3)
    
    def test_extended_thumb(self):
        """A thumb away from the palm and pointing up is extended."""
        self.assertTrue(thumb_extended(make_hand(thumb=True)))
    
    def test_curled_thumb(self):
        """A thumb folded over the palm is not extended."""
        self.assertFalse(thumb_extended(make_hand(thumb=False)))
    
    def test_thumb_close_to_palm_is_not_extended(self):
        """Vertical order alone is not enough."""
        landmarks = make_hand(thumb=True)
        tip_x, tip_y = landmarks[THUMB_TIP]
        landmarks[THUMB_TIP] = (palm_center_x(landmarks) - 0.05, tip_y)
        self.assertFalse(thumb_extended(landmarks))
    
    def test_threshold_is_tunable(self):
        """The thumb distance threshold changes the result."""
        landmarks = make_hand(thumb=True)
        self.assertTrue(thumb_extended(landmarks, distance_threshold=0.10))
        self.assertFalse(thumb_extended(landmarks, distance_threshold=0.30))


class TestCountFingers(unittest.TestCase):
    """Test the finger-count classifier."""
    
    def test_each_count(self):
        """Every synthetic pose is counted correctly."""
        for count in range(6):
            with self.subTest(count=count):
                self.assertEqual(count_fingers(hand_showing(count)), count)
    
    def test_closed_fist_is_zero(self):
        """A closed fist counts zero fingers."""
        self.assertEqual(count_fingers(make_hand()), 0)
        self.assertEqual(count_fingers(make_hand(), closed_fist_short_circuit=True), 0)
    
    def test_thumb_only_counts_without_short_circuit(self):
        """A lone thumb counts as one by default."""
        landmarks = make_hand(thumb=True)
        self.assertEqual(count_fingers(landmarks), 1)
    
    def test_thumb_only_is_zero_with_short_circuit(self):
        """A lone thumb counts zero with the closed-fist short circuit."""
        landmarks = make_hand(thumb=True)
        self.assertEqual(count_fingers(landmarks, closed_fist_short_circuit=True), 0)
    
    def test_short_circuit_does_not_affect_open_hands(self):
        """The short circuit leaves raised-finger counts alone."""
        self.assertEqual(count_fingers(hand_showing(5), closed_fist_short_circuit=True), 5)
    
    def test_output_range_over_all_poses(self):
        """Every combination of raised fingers stays within 0..5."""
        for pose in itertools.product([False, True], repeat=5):
            with self.subTest(pose=pose):
                count = count_fingers(make_hand(pose[:4], thumb=pose[4]))
                self.assertIn(count, range(6))
                self.assertEqual(count, sum(pose))
    
    def test_z_coordinate_is_ignored(self):
        """Depth values do not change the count."""
        landmarks = [(x, y, -0.05) for x, y in hand_showing(3)]
        self.assertEqual(count_fingers(landmarks), 3)


class TestHelpers(unittest.TestCase):
    """Test palm and frame helpers."""
    
    def test_full_palm_needs_four_fingers(self):
        """Four or more fingers make a full palm."""
        self.assertFalse(is_full_palm(3))
        self.assertTrue(is_full_palm(4))
        self.assertTrue(is_full_palm(5))
    
    def test_landmarks_in_frame(self):
        """Landmarks are in frame only within the normalized bounds."""
        self.assertTrue(landmarks_in_frame(hand_showing(5)))
        self.assertFalse(landmarks_in_frame(hand_showing(5, offset_x=0.6)))
    
    def test_margin_widens_frame(self):
        """A landmark just past the edge is in frame once a margin is allowed."""
        edge = hand_showing(5)
        edge[0] = (-0.005, edge[0][1])
        self.assertFalse(landmarks_in_frame(edge))
        self.assertTrue(landmarks_in_frame(edge, margin=0.05))
        self.assertFalse(landmarks_in_frame(hand_showing(5, offset_x=0.6), margin=0.05))


if __name__ == '__main__':
    unittest.main()
