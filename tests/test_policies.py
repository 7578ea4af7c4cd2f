import unittest

from algorithms.fixed_preference_policy import FixedPreferencePolicy
from algorithms.round_robin_policy import AlternatingPreferencePolicy
from fakes import AWS, GCP, PAIR


class TestPolicies(unittest.TestCase):
    def test_alternating_policy(self):
        policy = AlternatingPreferencePolicy()
        self.assertEqual(policy.preference_order(1, PAIR), [AWS, GCP])
        self.assertEqual(policy.preference_order(2, PAIR), [GCP, AWS])
        self.assertEqual(policy.preference_order(7, PAIR), [AWS, GCP])

    def test_alternating_policy_split(self):
        policy = AlternatingPreferencePolicy()
        firsts = [policy.preference_order(i, PAIR)[0] for i in range(1, 12)]
        self.assertEqual(firsts.count(AWS), 6)
        self.assertEqual(firsts.count(GCP), 5)

    def test_fixed_policy(self):
        self.assertEqual(FixedPreferencePolicy().preference_order(2, PAIR), [AWS, GCP])
        self.assertEqual(
            FixedPreferencePolicy(prefer_primary=False).preference_order(1, PAIR), [GCP, AWS]
        )


if __name__ == "__main__":
    unittest.main()
