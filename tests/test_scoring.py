"""
Scoring engine tests.

Covers the bilateral comparator, the clinical metric extractor and the
composite scorer, including the roll/scale invariance and score-range
properties the engine must hold for any landmark set.
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np

from face_symmetry.bilateral import bilateral_scores, pair_score
from face_symmetry.clinical import (
    aperture_score,
    extract_clinical_metrics,
    mouth_angle_score,
    mouth_vertical_score,
)
from face_symmetry.landmarks import to_points
from face_symmetry.scoring import (
    NO_SCORE,
    ClinicalScorer,
    Scores,
    critical_floor,
    mouth_weights,
)
from tests.fixtures.synthetic_landmarks import (
    BROW_L,
    EYELID_TOP_L,
    make_asymmetric_landmarks,
    make_symmetric_landmarks,
    open_mouth,
    raise_mouth_corner,
    rotate_landmarks,
    scale_landmarks,
)

ZONE_KEYS = ("global", "eyes", "mouth", "jaw", "nose")


class TestPairScore(unittest.TestCase):

    def test_equidistant_pair_is_perfect(self):
        self.assertEqual(pair_score(np.array([0.4, 0.1]), np.array([0.6, 0.9]), 0.5, 0.2), 100.0)

    def test_linear_falloff(self):
        # distances 0.1 and 0.15 -> diff 0.05 -> 0.25 of ref
        self.assertAlmostEqual(pair_score(np.array([0.4, 0.5]), np.array([0.65, 0.5]), 0.5, 0.2), 75.0)

    def test_clamped_at_zero(self):
        self.assertEqual(pair_score(np.array([0.5, 0.5]), np.array([0.9, 0.5]), 0.5, 0.2), 0.0)

    def test_position_invariance(self):
        a, b = np.array([0.4, 0.5]), np.array([0.65, 0.5])
        shifted = pair_score(a + 0.2, b + 0.2, 0.7, 0.2)
        self.assertAlmostEqual(shifted, pair_score(a, b, 0.5, 0.2))

    def test_mirror_symmetric_face_scores_100_everywhere(self):
        pts = to_points(make_symmetric_landmarks())
        for zone, value in bilateral_scores(pts, 0.5, 0.2).items():
            self.assertAlmostEqual(value, 100.0, places=9, msg=zone)


class TestClinicalMetrics(unittest.TestCase):

    def _metrics(self, lm):
        return extract_clinical_metrics(to_points(lm), ref=0.2, mid_x=0.5)

    def test_symmetric_face(self):
        m = self._metrics(make_symmetric_landmarks())
        self.assertAlmostEqual(m.eyes_apert_l, 0.02)
        self.assertAlmostEqual(m.eyes_apert_r, 0.02)
        self.assertAlmostEqual(m.eyes_apert_diff, 0.0)
        self.assertAlmostEqual(m.mouth_angle_deg, 0.0)
        self.assertAlmostEqual(m.mouth_vert_diff, 0.0)
        self.assertAlmostEqual(m.brow_asym, 0.0)
        self.assertFalse(m.smile_likely)
        self.assertEqual(aperture_score(m), 100.0)
        self.assertEqual(mouth_vertical_score(m), 100.0)
        self.assertEqual(mouth_angle_score(m), 100.0)

    def test_eye_aperture_difference(self):
        lm = make_symmetric_landmarks()
        lm[EYELID_TOP_L, 1] += 0.01  # left eye half closed
        m = self._metrics(lm)
        self.assertAlmostEqual(m.eyes_apert_l, 0.01)
        self.assertAlmostEqual(m.eyes_apert_diff, 0.01)
        self.assertAlmostEqual(m.eyes_apert_ratio_diff, 0.5)
        self.assertAlmostEqual(aperture_score(m), 50.0)

    def test_closed_eyes_do_not_divide_by_zero(self):
        lm = make_symmetric_landmarks()
        lm[[159, 145, 386, 374], 1] = 0.5
        m = self._metrics(lm)
        self.assertEqual(m.eyes_apert_ratio_diff, 0.0)
        self.assertEqual(aperture_score(m), 100.0)

    def test_mouth_vertical_and_angle(self):
        m = self._metrics(raise_mouth_corner(make_symmetric_landmarks(), 0.02))
        self.assertAlmostEqual(m.mouth_vert_diff, 0.1)
        self.assertAlmostEqual(mouth_vertical_score(m), 90.0)
        expected_angle = np.degrees(np.arctan2(0.02, 0.1))
        self.assertAlmostEqual(m.mouth_angle_deg, expected_angle)
        self.assertAlmostEqual(mouth_angle_score(m), 100.0 * (1 - expected_angle / 12.0))

    def test_mouth_angle_capped(self):
        m = self._metrics(raise_mouth_corner(make_symmetric_landmarks(), 0.05))
        self.assertGreater(m.mouth_angle_deg, 12.0)
        self.assertEqual(mouth_angle_score(m), 0.0)

    def test_smile_threshold(self):
        m = self._metrics(open_mouth(make_symmetric_landmarks(), 0.101))
        self.assertAlmostEqual(m.dental_proxy, 0.1 * 0.101 / 0.04)
        self.assertGreater(m.dental_proxy, 0.25)
        self.assertTrue(m.smile_likely)
        m = self._metrics(open_mouth(make_symmetric_landmarks(), 0.099))
        self.assertFalse(m.smile_likely)

    def test_brow_asymmetry(self):
        lm = make_symmetric_landmarks()
        lm[BROW_L, 1] += 0.02  # left brow lowered towards the eye
        m = self._metrics(lm)
        self.assertAlmostEqual(m.brow_eye_dist_r, 0.06 / 0.2)
        self.assertAlmostEqual(m.brow_eye_dist_l, 0.04 / 0.2)
        self.assertAlmostEqual(m.brow_asym, 0.1)

    def test_rounding_is_display_only(self):
        lm = make_symmetric_landmarks()
        lm[EYELID_TOP_L, 1] += 0.0012345
        m = self._metrics(lm)
        shown = m.rounded()
        self.assertEqual(shown["eyes_apert_l"], round(m.eyes_apert_l, 4))
        self.assertNotEqual(shown["eyes_apert_l"], m.eyes_apert_l)
        self.assertIs(shown["smile_likely"], False)


class TestCompositeScorer(unittest.TestCase):

    def setUp(self):
        self.scorer = ClinicalScorer()

    def test_reference_example(self):
        scores = self.scorer.score(make_symmetric_landmarks())
        self.assertGreaterEqual(scores.global_score, 99.0)
        self.assertTrue(scores.quality.roll_ok)
        self.assertAlmostEqual(scores.quality.roll_deg, 0.0)
        self.assertEqual(scores.frames_processed, 1)
        self.assertEqual(scores.quality.missing, ())
        for key in ZONE_KEYS:
            self.assertEqual(scores.zone_values()[key], 100.0, msg=key)

    def test_zone_weights(self):
        b = self.scorer.evaluate(make_asymmetric_landmarks())
        eyes = 0.5 * b.bilateral["eyes"] + 0.5 * b.aperture
        self.assertAlmostEqual(b.zones["eyes"], eyes)
        w = b.mouth_weights
        mouth = w["bilateral"] * b.bilateral["mouth"] + w["vertical"] * b.mouth_vertical + w["angle"] * b.mouth_angle
        self.assertAlmostEqual(b.zones["mouth"], mouth)
        self.assertEqual(b.zones["jaw"], b.bilateral["jaw"])
        self.assertEqual(b.zones["nose"], b.bilateral["nose"])
        weighted = 0.32 * eyes + 0.38 * mouth + 0.18 * b.zones["jaw"] + 0.12 * b.zones["nose"]
        self.assertAlmostEqual(b.weighted_global, weighted)

    def test_mouth_weights_sum_to_one(self):
        for smiling in (False, True):
            self.assertAlmostEqual(sum(mouth_weights(smiling).values()), 1.0)
        self.assertAlmostEqual(mouth_weights(False)["vertical"], 0.4)
        self.assertAlmostEqual(mouth_weights(False)["angle"], 0.2)
        self.assertAlmostEqual(mouth_weights(True)["vertical"], 0.2)
        self.assertAlmostEqual(mouth_weights(True)["angle"], 0.1)

    def test_smile_reweights_mouth(self):
        tilted = raise_mouth_corner(make_symmetric_landmarks(), 0.02)
        neutral = self.scorer.evaluate(open_mouth(tilted, 0.01))
        smiling = self.scorer.evaluate(open_mouth(tilted, 0.101))
        self.assertFalse(neutral.clinical.smile_likely)
        self.assertTrue(smiling.clinical.smile_likely)
        self.assertLess(smiling.mouth_weights["vertical"], neutral.mouth_weights["vertical"])
        self.assertLess(smiling.mouth_weights["angle"], neutral.mouth_weights["angle"])
        self.assertGreater(smiling.mouth_weights["bilateral"], neutral.mouth_weights["bilateral"])
        # same corner geometry, but the smile is forgiven
        self.assertGreater(smiling.zones["mouth"], neutral.zones["mouth"])

    def test_critical_floor_pulls_global_down(self):
        b = self.scorer.evaluate(raise_mouth_corner(make_symmetric_landmarks(), 0.03))
        self.assertEqual(b.mouth_angle, 0.0)
        self.assertEqual(b.critical_min, 0.0)
        self.assertGreater(b.bilateral["eyes"], 99.0)
        self.assertLess(b.global_score, b.weighted_global)
        self.assertAlmostEqual(b.global_score, 0.4 * b.weighted_global)

    def test_critical_floor_noop_when_critical_is_high(self):
        self.assertEqual(critical_floor(80.0, 95.0), 80.0)
        self.assertAlmostEqual(critical_floor(80.0, 50.0), 0.6 * 50.0 + 0.4 * 80.0)

    def test_scores_rounded_to_one_decimal(self):
        scores = self.scorer.score(make_asymmetric_landmarks())
        for key, value in scores.zone_values().items():
            self.assertEqual(value, round(value, 1), msg=key)

    def test_roll_invariance(self):
        base = self.scorer.evaluate(make_asymmetric_landmarks())
        for deg in (-25.0, 8.0, 40.0):
            tilted = self.scorer.evaluate(rotate_landmarks(make_asymmetric_landmarks(), deg, pivot=(0.45, 0.6)))
            self.assertAlmostEqual(tilted.roll_deg, deg, places=9)
            self.assertAlmostEqual(tilted.global_score, base.global_score, places=9)
            for zone in base.zones:
                self.assertAlmostEqual(tilted.zones[zone], base.zones[zone], places=9, msg=zone)

    def test_roll_quality_flag(self):
        ok = self.scorer.score(rotate_landmarks(make_symmetric_landmarks(), 4.0))
        bad = self.scorer.score(rotate_landmarks(make_symmetric_landmarks(), -9.0))
        self.assertTrue(ok.quality.roll_ok)
        self.assertFalse(bad.quality.roll_ok)
        self.assertAlmostEqual(bad.quality.roll_deg, -9.0, places=6)
        # a tilted symmetric face is still scored as symmetric
        self.assertGreaterEqual(bad.global_score, 99.0)

    def test_scale_invariance(self):
        base = self.scorer.evaluate(make_asymmetric_landmarks())
        for k in (0.6, 1.3):
            scaled = self.scorer.evaluate(scale_landmarks(make_asymmetric_landmarks(), k, pivot=(0.5, 0.55)))
            self.assertAlmostEqual(scaled.global_score, base.global_score, places=9)
            for zone in base.zones:
                self.assertAlmostEqual(scaled.zones[zone], base.zones[zone], places=9, msg=zone)
            self.assertAlmostEqual(scaled.clinical.dental_proxy, base.clinical.dental_proxy, places=12)

    def test_scores_always_in_range(self):
        rng = np.random.default_rng(7)
        for _ in range(60):
            lm = rng.random((468, 3))
            scores = self.scorer.score(lm)
            for key, value in scores.zone_values().items():
                self.assertGreaterEqual(value, 0.0, msg=key)
                self.assertLessEqual(value, 100.0, msg=key)

    def test_degenerate_inputs_still_score(self):
        for lm in (np.zeros((468, 3)), make_symmetric_landmarks()[:50], []):
            scores = self.scorer.score(lm)
            self.assertTrue(scores.detected)
            for key in ZONE_KEYS:
                value = scores.zone_values()[key]
                self.assertTrue(0.0 <= value <= 100.0, msg=key)
        partial = self.scorer.score(make_symmetric_landmarks()[:50])
        self.assertIn("mouth_corner_r", partial.quality.missing)

    def test_no_face_is_not_a_zero_score(self):
        scores = self.scorer.score(None)
        self.assertIs(scores, NO_SCORE)
        self.assertFalse(scores.detected)
        self.assertIsNone(scores.global_score)
        self.assertNotEqual(scores, Scores(global_score=0.0, eyes=0.0, mouth=0.0, jaw=0.0, nose=0.0))

    def test_clinical_bundle_optional(self):
        self.assertIsNotNone(self.scorer.score(make_symmetric_landmarks()).clinical)
        bare = ClinicalScorer(include_clinical=False).score(make_symmetric_landmarks())
        self.assertIsNone(bare.clinical)

    def test_to_dict_shape(self):
        out = self.scorer.score(make_asymmetric_landmarks()).to_dict()
        for key in ZONE_KEYS:
            self.assertIn(key, out)
        self.assertEqual(out["framesProcessed"], 1)
        self.assertIn("rollDeg", out["quality"])
        self.assertIn("rollOk", out["quality"])
        self.assertIn("dental_proxy", out["clinical"])
        self.assertEqual(NO_SCORE.to_dict(), {"detected": False, "framesProcessed": 0})


if __name__ == "__main__":
    unittest.main()
