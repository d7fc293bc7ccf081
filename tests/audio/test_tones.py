import unittest
from types import SimpleNamespace

import numpy as np

from audio import AudioConfig, AudioConfigurationError, AudioError, CueTone, synthesize_tone


class SynthesizeToneTests(unittest.TestCase):
    def test_tone_is_mono_float32_with_expected_length(self) -> None:
        wav = synthesize_tone(800.0, 200, sample_rate_hz=44100)

        self.assertEqual(np.float32, wav.dtype)
        self.assertEqual(1, wav.ndim)
        self.assertEqual(8820, len(wav))

    def test_tone_decays_from_volume(self) -> None:
        wav = synthesize_tone(1000.0, 200, sample_rate_hz=44100, volume=0.3)

        self.assertLessEqual(float(np.max(np.abs(wav))), 0.3 + 1e-6)
        head = float(np.max(np.abs(wav[:441])))
        tail = float(np.max(np.abs(wav[-441:])))
        self.assertGreater(head, 0.2)
        self.assertLess(tail, 0.02)

    def test_rejects_invalid_parameters(self) -> None:
        for kwargs in (
            {"frequency_hz": 0, "duration_ms": 200},
            {"frequency_hz": 800, "duration_ms": 0},
            {"frequency_hz": 800, "duration_ms": 200, "sample_rate_hz": 0},
            {"frequency_hz": 800, "duration_ms": 200, "volume": 1.5},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(AudioError):
                    synthesize_tone(**kwargs)


class AudioConfigTests(unittest.TestCase):
    def test_defaults_match_cue_policy(self) -> None:
        config = AudioConfig()

        self.assertEqual(CueTone(1000.0, 200), config.stretch_start)
        self.assertEqual(CueTone(800.0, 200), config.hold_start)
        self.assertEqual(CueTone(600.0, 200), config.side_change)
        self.assertEqual(CueTone(1000.0, 200), config.complete)
        self.assertEqual(3, config.complete_repeat)
        self.assertAlmostEqual(0.2, config.complete_spacing_seconds)

    def test_from_settings_converts_milliseconds(self) -> None:
        settings = SimpleNamespace(
            enabled=True,
            output_device=2,
            sample_rate_hz=22050,
            volume=0.5,
            cue_duration_ms=150,
            stretch_start_hz=1100.0,
            hold_start_hz=900.0,
            side_change_hz=500.0,
            complete_hz=1200.0,
            complete_repeat=4,
            complete_spacing_ms=250,
        )

        config = AudioConfig.from_settings(settings)

        self.assertEqual(2, config.output_device_index)
        self.assertEqual(CueTone(500.0, 150), config.side_change)
        self.assertEqual(4, config.complete_repeat)
        self.assertAlmostEqual(0.25, config.complete_spacing_seconds)

    def test_rejects_invalid_values(self) -> None:
        with self.assertRaises(AudioConfigurationError):
            AudioConfig(volume=0.0)
        with self.assertRaises(AudioConfigurationError):
            AudioConfig(complete_repeat=0)
        with self.assertRaises(AudioConfigurationError):
            AudioConfig(hold_start=CueTone(-1.0, 200))


if __name__ == "__main__":
    unittest.main()
