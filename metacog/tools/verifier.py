import random
from typing import Optional, Tuple


class ProofVerifier:
    """
    Stand-in for an external formal proof checker.

    Shorter proofs are more likely to pass: the success chance is
    ``max(0.1, 1 - len(proof_code) / 1000)``.
    """

    SUCCESS_FEEDBACK = "Verification successful. The proof is logically sound."

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    @staticmethod
    def success_chance(proof_code: str) -> float:
        return max(0.1, 1 - len(proof_code) / 1000)

    def verify(self, proof_code: str) -> Tuple[bool, str]:
        verified = self._rng.random() < self.success_chance(proof_code)

        if verified:
            return True, self.SUCCESS_FEEDBACK

        line = self._rng.randint(1, 10)
        return False, f"Verification failed. Found logical inconsistency near line {line}."
