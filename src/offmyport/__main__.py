"""Entry point: python -m offmyport / offmyport."""

import sys
from typing import Callable, List, Optional

from .cli import PortSpecError, parse_args, parse_ports
from .errors import OffMyPortError
from .platforms import PlatformAdapter, get_adapter
from .report import format_row, no_match_message, render_json
from .schema import KillSignal, ListeningProcess

Prompt = Callable[[str], str]


def _plural(n: int) -> str:
    return "es" if n != 1 else ""


def _kill_error_message(err: OSError, p: ListeningProcess, port_arg: Optional[str]) -> str:
    if isinstance(err, PermissionError):
        return f"Permission denied for PID {p.pid}. Try: sudo offmyport {port_arg or ''} --kill"
    if isinstance(err, ProcessLookupError):
        return f"PID {p.pid} no longer exists"
    return f"Failed to kill PID {p.pid}: {err}"


def select_processes(
    processes: List[ListeningProcess],
    filter_ports: Optional[List[int]],
) -> List[ListeningProcess]:
    """Keep listeners on the requested ports (all when None), sorted by port."""
    if filter_ports:
        wanted = set(filter_ports)
        processes = [p for p in processes if p.port in wanted]
    return sorted(processes, key=lambda p: (p.port, p.pid))


def _kill_mode(
    adapter: PlatformAdapter,
    processes: List[ListeningProcess],
    force: bool,
    murder: bool,
    port_arg: Optional[str],
    prompt: Prompt = input,
) -> int:
    """Kill every listed process, after confirmation unless force is set."""
    sig = KillSignal.KILL if murder else KillSignal.TERM

    print(f"\nProcesses to kill ({len(processes)}):\n")
    for p in processes:
        print(f"  {format_row(p)}")
    print()

    if not force:
        try:
            answer = prompt(f"Kill {len(processes)} process{_plural(len(processes))}? [y/N] ")
        except (EOFError, KeyboardInterrupt):
            answer = ""
        if answer.strip().lower() not in ("y", "yes"):
            print("Cancelled")
            return 0

    killed = 0
    failed = 0
    for p in processes:
        try:
            adapter.kill_process(p.pid, sig)
        except OSError as err:
            print(_kill_error_message(err, p, port_arg), file=sys.stderr)
            failed += 1
            continue
        if murder:
            print(f"Process {p.command} \x1b[91mELIMINATED\x1b[0m!")
        else:
            print(f"Killed PID {p.pid} ({p.command} on port {p.port})")
        killed += 1

    summary = f"\nKilled {killed} process{_plural(killed)}"
    if failed:
        summary += f", {failed} failed"
    print(summary)
    return 1 if failed else 0


def _interactive_mode(
    adapter: PlatformAdapter,
    processes: List[ListeningProcess],
    port_arg: Optional[str],
    prompt: Prompt = input,
) -> int:
    """Numbered list, pick one process, pick a signal. 'q' or EOF cancels."""
    print(f"\nFound {len(processes)} listening process{_plural(len(processes))} (q to quit)\n")
    for i, p in enumerate(processes, 1):
        print(f"  {i:>3}) {format_row(p)}")
    print()

    try:
        choice = prompt("Select a process to kill: ").strip()
        if choice.lower() == "q":
            print("Cancelled")
            return 0
        if not choice.isdigit() or not 1 <= int(choice) <= len(processes):
            print(f"Invalid selection: {choice}", file=sys.stderr)
            return 1
        selected = processes[int(choice) - 1]

        print(f"Kill {selected.command} (PID {selected.pid}) with:")
        print("  1) SIGTERM (gentle - allows cleanup)")
        print("  2) SIGKILL (force - immediate)")
        sig_choice = prompt("Signal [1]: ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print("\nCancelled")
        return 0

    if sig_choice == "q":
        print("Cancelled")
        return 0
    sig = KillSignal.KILL if sig_choice in ("2", "sigkill", "kill") else KillSignal.TERM

    try:
        adapter.kill_process(selected.pid, sig)
    except PermissionError:
        print(f"\nPermission denied. Try: sudo offmyport {port_arg or ''}", file=sys.stderr)
        return 1
    except ProcessLookupError:
        print("\nProcess no longer exists", file=sys.stderr)
        return 1
    except OSError as err:
        print(f"\nFailed to kill process: {err}", file=sys.stderr)
        return 1

    print(f"\nSent {sig.value} to PID {selected.pid} ({selected.command} on port {selected.port})")
    return 0


def main(argv: Optional[List[str]] = None, adapter: Optional[PlatformAdapter] = None) -> int:
    args = parse_args(argv)
    try:
        filter_ports = parse_ports(args.ports) if args.ports else None
    except PortSpecError as e:
        print(str(e), file=sys.stderr)
        return 1

    if adapter is None:
        adapter = get_adapter()
    try:
        processes = select_processes(adapter.list_listening_processes(), filter_ports)
    except OffMyPortError as e:
        print(str(e), file=sys.stderr)
        return 1

    if args.json:
        print(render_json(adapter, processes))
        return 0

    if not processes:
        print(no_match_message(filter_ports))
        return 0

    if args.kill:
        return _kill_mode(adapter, processes, force=args.force, murder=args.murder, port_arg=args.ports)
    return _interactive_mode(adapter, processes, port_arg=args.ports)


if __name__ == "__main__":
    sys.exit(main())
