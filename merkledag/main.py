import sys

from merkledag.models import FileStore, HttpStore, MerkleDag, MerkleDagError
from merkledag.utils import configure_logging, get_parser


def get_dag(args) -> MerkleDag:
    if args.remote:
        store = HttpStore(args.remote)
    else:
        store = FileStore(args.store)
    return MerkleDag(store, hash_name=args.hash_name)


def run(dag: MerkleDag, args) -> int:
    match args.command:
        case "init":
            dag.init_store()
        case "add":
            dag.add(args.path)
            sys.stdout.write("\n")
        case "cat":
            content = dag.cat(args.root_hash, args.path, verify=args.verify, pretty_print=True)
            if content is None:
                sys.stderr.write(f"not found: {args.path}\n")
                return 1
        case "ls":
            entries = dag.ls_tree(
                args.root_hash, args.path, name_only=args.name_only, pretty_print=True
            )
            if entries is None:
                sys.stderr.write(f"not found: {args.path or '/'}\n")
                return 1
        case "cat-object":
            dag.cat_object(args.hash_value, kind=args.kind, pretty_print=True)
        case _:
            raise RuntimeError(f"Unknown command #{args.command}")
    return 0


def main(argv=None) -> int:
    parser = get_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2
    configure_logging(args.verbose)
    try:
        dag = get_dag(args)
        try:
            return run(dag, args)
        finally:
            if isinstance(dag.store, HttpStore):
                dag.store.close()
    except (MerkleDagError, OSError, ValueError) as e:
        sys.stderr.write(f"error: {e}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
