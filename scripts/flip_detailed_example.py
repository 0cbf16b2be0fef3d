"""
Compare three FLIP scenarios of the sample project.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dealcalc.calculations.scenarios import FlipDetailedCalculator
from dealcalc.samples.flip import SAMPLE_FLIP, OPTIMISTIC_UPDATE, PESSIMISTIC_UPDATE


def main():
    calculator = FlipDetailedCalculator(SAMPLE_FLIP)
    calculator.set_scenario(2).update_current_scenario(OPTIMISTIC_UPDATE)
    calculator.set_scenario(3).update_current_scenario(PESSIMISTIC_UPDATE)

    results = calculator.compare_scenarios()
    profitability = results.comparison.profitability

    print("=== FLIP scenario comparison ===")

    print("\nNet profit:")
    for number in (1, 2, 3):
        value = getattr(profitability.net_profit, f"scenario{number}")
        print(f"Scenario {number}: {value:.2f} $")

    print("\nAnnualized ROI:")
    for number in (1, 2, 3):
        value = getattr(profitability.annualized_roi, f"scenario{number}")
        print(f"Scenario {number}: {value:.2f} %")

    print("\nTotal investment:")
    for number in (1, 2, 3):
        value = getattr(profitability.total_investment, f"scenario{number}")
        print(f"Scenario {number}: {value:.2f} $")

    print(f"\nBest scenario: {results.best_scenario}")


if __name__ == "__main__":
    main()
