"""
Simple simulation script: random players against each computer difficulty.
"""

import requests
import random
import sys


def main():
    BASE_URL = "http://localhost:8000/api/v1"
    MATCHES_PER_DIFFICULTY = 5

    print("=== TicTacToe Simulation ===\n")

    stats = {}
    for difficulty in ["easy", "medium", "hard"]:
        stats[difficulty] = {"wins": 0, "losses": 0, "draws": 0}
        print(f"\nPlaying {MATCHES_PER_DIFFICULTY} best-of-3 matches against {difficulty}...")

        response = requests.post(
            f"{BASE_URL}/sessions",
            json={"mode": "cpu", "difficulty": difficulty, "best_of": 3, "player_x_name": "Randy"}
        )
        if response.status_code != 200:
            print(f"Failed to create session: {response.text}")
            sys.exit(1)
        session_key = response.json()["session_key"]

        matches_played = 0
        while matches_played < MATCHES_PER_DIFFICULTY:
            state = requests.get(f"{BASE_URL}/sessions/{session_key}").json()
            round_state = state["round"]

            if round_state["status"] == "round_over":
                if round_state["winner"] == "X":
                    stats[difficulty]["wins"] += 1
                elif round_state["winner"] == "O":
                    stats[difficulty]["losses"] += 1
                else:
                    stats[difficulty]["draws"] += 1

                if state["match"]["is_over"]:
                    matches_played += 1
                    print(f"  Match {matches_played}: {state['match']['winner']} "
                          f"({state['match']['x_wins']}-{state['match']['o_wins']})")
                requests.post(f"{BASE_URL}/sessions/{session_key}/next-round")
                continue

            if state["is_computer_turn"]:
                # Don't wait for the paced reply
                requests.post(f"{BASE_URL}/sessions/{session_key}/computer-move")
                continue

            empties = [i for i, cell in enumerate(round_state["board"]) if cell == ""]
            response = requests.post(
                f"{BASE_URL}/sessions/{session_key}/moves",
                json={"index": random.choice(empties), "player": "X"}
            )
            if response.status_code != 200:
                print(f"Move failed: {response.text}")

    # Display results
    print("\n=== Results (rounds, from the random player's side) ===\n")
    for difficulty, result in stats.items():
        total = result["wins"] + result["losses"] + result["draws"]
        win_rate = (result["wins"] / total * 100) if total > 0 else 0
        print(f"  {difficulty}:")
        print(f"     Wins: {result['wins']}")
        print(f"     Losses: {result['losses']}")
        print(f"     Draws: {result['draws']}")
        print(f"     Win Rate: {win_rate:.1f}%")

    print("\n Simulation complete!")


if __name__ == "__main__":
    main()
