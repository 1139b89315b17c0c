from db import InMemoryGameRepository
from trapcat.engine import GameEngine
from trapcat.hexgrid import HexPosition
from trapcat.render_ascii import render_board_ascii


def run_repl(engine: GameEngine, board_size=None, difficulty=None):
    game = engine.start_new_game(board_size, difficulty)
    game_id = game.game_id

    print("Trap the Cat")
    print("Type 'help' for commands. Type 'exit' to quit.\n")
    print(render_board_ascii(game))

    while True:
        game = engine.get_game(game_id)
        prompt = f"[Move {game.move_count} | {game.status.value}]> "
        try:
            raw = input(prompt).strip()
        except EOFError:
            break
        cmd = raw.lower()

        if cmd in ("quit", "exit"):
            break

        elif cmd == "help":
            print("Commands:")
            print("  map                 - show the board")
            print("  block <q> <r>       - block a cell; the cat answers")
            print("  suggest             - best cell to block right now")
            print("  undo                - take back the last block")
            print("  pause               - pause or resume the game")
            print("  stats               - score and statistics")
            print("  path                - the cat's shortest escape route")
            print("  difficulty <label>  - facil / normal / dificil")
            print("  new                 - start a new game")

        elif cmd == "map":
            print(render_board_ascii(game))

        elif cmd.startswith("block"):
            handle_block(engine, game_id, raw)

        elif cmd == "suggest":
            h = engine.suggest_move(game_id)
            print("No suggestion." if h is None else f"Suggest blocking {h.q} {h.r}")

        elif cmd == "undo":
            before = game.move_count
            game = engine.undo_last_move(game_id)
            print("Nothing to undo." if game.move_count == before else "Undone.")
            print(render_board_ascii(game))

        elif cmd == "pause":
            paused = engine.toggle_pause(game_id)
            if paused is None:
                print("The game is over.")
            else:
                print("Paused." if paused else "Resumed.")

        elif cmd == "stats":
            show_stats(engine, game_id)

        elif cmd == "path":
            show_escape_path(engine, game)

        elif cmd.startswith("difficulty "):
            label = raw.split(maxsplit=1)[1]
            game = engine.set_difficulty(game_id, label)
            print(f"Difficulty {game.difficulty} ({engine.strategy_for(game).name})")

        elif cmd == "new":
            game = engine.start_new_game(game.board_size, game.difficulty)
            game_id = game.game_id
            print(render_board_ascii(game))

        else:
            print("Unknown command")


def handle_block(engine: GameEngine, game_id: str, raw: str) -> None:
    parts = raw.split()
    if len(parts) != 3:
        print("Usage: block <q> <r>")
        return
    try:
        q = int(parts[1])
        r = int(parts[2])
    except ValueError:
        print("q and r must be integers.")
        return

    before = engine.get_game(game_id).move_count
    game = engine.execute_player_move(game_id, HexPosition(q, r))
    if game.move_count == before:
        print(f"Cannot block ({q},{r}).")
        return

    print(render_board_ascii(game))
    if game.is_finished():
        verdict = "You trapped the cat!" if game.has_player_won() else "The cat escaped."
        print(f"{verdict} Score: {game.calculate_score()}")


def show_stats(engine: GameEngine, game_id: str) -> None:
    stats = engine.game_statistics(game_id)
    analysis = engine.analyze_game(game_id)
    for k, v in stats.items():
        print(f"  {k}: {v}")
    for k, v in analysis["advancedStats"].items():
        print(f"  {k}: {v}")
    print(f"  tip: {analysis['tip']}")


def show_escape_path(engine: GameEngine, game) -> None:
    target = engine.target_position(game)
    path = engine.strategy_for(game).get_full_path(game.cat_position, target)
    if not path:
        print("No path.")
    else:
        print("Path:", " -> ".join(str(h) for h in path))
        print(f"Steps: {len(path) - 1}")


if __name__ == "__main__":
    run_repl(GameEngine(InMemoryGameRepository()))
