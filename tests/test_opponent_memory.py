"""Tests for opponent pattern tracking."""

import unittest

from poker.game_state import CALL, FOLD, RAISE
from poker.opponent_memory import (
    ObservedAction,
    OpponentMemory,
    analyze_positional_play,
    analyze_pot_odds_awareness,
    smooth_update,
)


def observed(action, hand_number=1, **overrides) -> ObservedAction:
    return ObservedAction(hand_number=hand_number, betting_round='preflop', action=action, **overrides)


class TestAnalysis(unittest.TestCase):

    def test_smooth_update(self):
        self.assertAlmostEqual(smooth_update(0.5, 1.0, 0.1), 0.55)
        self.assertAlmostEqual(smooth_update(0.5, 0.5, 0.3), 0.5)

    def test_positional_play(self):
        actions = [
            observed(RAISE, position='Button'),
            observed(RAISE, position='Cutoff'),
            observed(FOLD, position='Under the Gun'),
            observed(CALL, position='Early Position'),
        ]
        self.assertEqual(analyze_positional_play(actions), 1.0)

    def test_positional_play_needs_both_ends(self):
        self.assertEqual(analyze_positional_play([observed(RAISE, position='Button')]), 0.5)

    def test_pot_odds_awareness(self):
        actions = [
            observed(CALL, pot_odds=4.0),
            observed(FOLD, pot_odds=1.5),
            observed(CALL, pot_odds=1.5),
            observed(RAISE),
        ]
        self.assertAlmostEqual(analyze_pot_odds_awareness(actions), 2 / 3)
        self.assertEqual(analyze_pot_odds_awareness([observed(RAISE)]), 0.5)


class TestOpponentMemory(unittest.TestCase):

    def setUp(self):
        self.memory = OpponentMemory()
        self.memory.initialize_player('ai_1', 'Ada')

    def test_unknown_player_is_ignored(self):
        self.memory.record_action('ghost', observed(RAISE))
        self.assertEqual(self.memory.total_actions, 0)
        self.assertIsNone(self.memory.get_player_tendencies('ghost'))

    def test_initialize_is_idempotent(self):
        profile = self.memory.players['ai_1']
        self.assertIs(self.memory.initialize_player('ai_1', 'Someone else'), profile)
        self.assertEqual(profile.name, 'Ada')

    def test_single_raise_updates_patterns(self):
        self.memory.record_action('ai_1', observed(RAISE))
        patterns = self.memory.players['ai_1'].patterns
        self.assertAlmostEqual(patterns.aggression, 0.55)
        self.assertAlmostEqual(patterns.tightness, 0.45)
        self.assertAlmostEqual(patterns.raise_frequency, 0.264)
        self.assertAlmostEqual(patterns.call_frequency, 0.276)

    def test_history_is_capped(self):
        for i in range(205):
            self.memory.record_action('ai_1', observed(CALL, hand_number=i))
        profile = self.memory.players['ai_1']
        self.assertEqual(len(profile.actions), 200)
        self.assertEqual(profile.actions[0].hand_number, 5)
        self.assertEqual(profile.stats.total_actions, 205)
        self.assertEqual(self.memory.total_actions, 205)

    def test_advice_needs_enough_data(self):
        for _ in range(10):
            self.memory.record_action('ai_1', observed(RAISE))
        self.assertAlmostEqual(self.memory.players['ai_1'].reliability, 0.2)
        self.assertEqual(self.memory.get_strategic_advice('ai_1'), {'advice': 'Insufficient data', 'confidence': 0})
        self.assertEqual(self.memory.get_strategic_advice('nobody')['advice'], 'Insufficient data')

    def test_advice_for_maniac(self):
        for _ in range(50):
            self.memory.record_action('ai_1', observed(RAISE))
        advice = self.memory.get_strategic_advice('ai_1')
        self.assertEqual(advice['confidence'], 1.0)
        self.assertIn('very aggressive', advice['advice'])
        self.assertIn('Loose player', advice['advice'])

    def test_hand_results(self):
        self.memory.record_action('ai_1', observed(RAISE, hand_number=7, is_bluff=True))
        self.memory.record_hand_result('ai_1', 7, won=True, showdown=True, pot_won=1500, was_bluff=True)
        self.memory.record_hand_result('ai_1', 8, won=True, pot_won=400)

        profile = self.memory.players['ai_1']
        self.assertEqual(profile.stats.hands_played, 2)
        self.assertEqual(profile.stats.showdowns, 1)
        self.assertEqual(profile.stats.wins, 2)
        self.assertEqual(profile.stats.biggest_pot, 1500)
        self.assertAlmostEqual(profile.patterns.bluff_frequency, 0.19)

    def test_export_and_import(self):
        for i in range(60):
            self.memory.record_action('ai_1', observed(CALL, hand_number=i, pot_odds=3.5))
        self.memory.record_hand_completed()
        exported = self.memory.export_memory()

        self.assertEqual(list(exported['players']), ['ai_1'])
        self.assertEqual(len(exported['players']['ai_1']['actions']), 50)
        self.assertEqual(exported['global_stats'], {'total_hands': 1, 'total_actions': 60})

        restored = OpponentMemory()
        restored.import_memory(exported)
        profile = restored.players['ai_1']
        self.assertEqual(profile.name, 'Ada')
        self.assertEqual(profile.stats.total_actions, 60)
        self.assertEqual(profile.actions[-1].hand_number, 59)
        self.assertEqual(profile.actions[-1].timestamp, self.memory.players['ai_1'].actions[-1].timestamp)
        self.assertEqual(restored.total_hands, 1)

    def test_import_ignores_empty(self):
        self.memory.import_memory(None)
        self.memory.import_memory({})
        self.assertEqual(list(self.memory.players), ['ai_1'])

    def test_stats_and_clear(self):
        self.memory.record_action('ai_1', observed(FOLD))
        stats = self.memory.get_memory_stats()
        self.assertEqual(stats['total_players'], 1)
        summary = stats['player_summaries'][0]
        self.assertEqual(summary['name'], 'Ada')
        self.assertEqual(summary['patterns']['tightness'], 0.55)

        self.memory.clear()
        self.assertEqual(self.memory.get_memory_stats()['total_players'], 0)
        self.assertEqual(self.memory.total_actions, 0)


if __name__ == '__main__':
    unittest.main()
