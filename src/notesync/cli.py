"""Command-line interface for notesync."""


import argparse
import json
import logging
import sys
from terminaltables import AsciiTable
from notesync.api import Notesync
from notesync.errors import Error
from notesync.models import Project, PushResult


def _project_row(project: Project) -> tuple:
    return (project.name, project.id, len(project.notes), project.updated_at.strftime('%Y-%m-%d %H:%M'))


def _print_projects(projects, as_json: bool) -> None:
    if as_json:
        print(json.dumps([p.metadata_json() for p in projects]))
        return
    data = [('Name', 'Id', 'Notes', 'Updated')] + [_project_row(p) for p in projects]
    table = AsciiTable(data)
    table.justify_columns[2] = 'right'
    print(table.table)


def _print_push_result(project: Project, result: PushResult) -> None:
    print(f'Pushed {len(result.succeeded)} of {len(project.notes)} notes in {project.name}')
    for failure in result.failed:
        print(f'Failed to push {failure.note.title or failure.note.id}: {failure.error}', file=sys.stderr)


def _projects(args, ns: Notesync) -> int:
    projects = sorted(ns.snapshot.projects, key=lambda p: p.name.lower())
    _print_projects(projects, args.json)
    return 0


def _push(args, ns: Notesync) -> int:
    project = ns.project(args.project[0])
    result = ns.push(project.id)
    if args.json:
        print(json.dumps({
            'succeeded': [n.id for n in result.succeeded],
            'failed': [{'id': f.note.id, 'error': str(f.error)} for f in result.failed],
        }))
    else:
        _print_push_result(project, result)
    return 0 if result.ok else 1


def _pull(args, ns: Notesync) -> int:
    pulled = ns.pull(args.name)
    if args.json:
        print(json.dumps([p.metadata_json() for p in pulled]))
    elif not pulled and args.name:
        print(f'Project {args.name} has not been published', file=sys.stderr)
    else:
        for project in pulled:
            print(f'Pulled {project.name} ({len(project.notes)} notes)')
    return 0


def _sync(args, ns: Notesync) -> int:
    report = ns.sync()
    if args.json:
        print(json.dumps({'uploaded': report.uploaded, 'downloaded': report.downloaded, 'errors': report.errors}))
    else:
        print(f'Uploaded {report.uploaded} projects, downloaded {report.downloaded} projects')
        for error in report.errors:
            print(error, file=sys.stderr)
    return 1 if report.errors else 0


def _export(args, ns: Notesync) -> int:
    document = ns.export()
    if args.file:
        with open(args.file, 'w', encoding='utf-8') as file:
            file.write(document)
    else:
        print(document)
    return 0


def _import(args, ns: Notesync) -> int:
    with open(args.file[0], 'r', encoding='utf-8') as file:
        document = file.read()
    snapshot = ns.import_document(document)
    print(f'Imported {len(snapshot.projects)} projects')
    return 0


def _backups(args, ns: Notesync) -> int:
    keys = ns.store.list_backups()
    if args.json:
        print(json.dumps(keys))
    else:
        for key in keys:
            print(key)
    return 0


def _restore(args, ns: Notesync) -> int:
    snapshot = ns.restore_backup(args.key[0])
    print(f'Restored {len(snapshot.projects)} projects from {args.key[0]}')
    return 0


def _render(args, ns: Notesync) -> int:
    template = None
    if args.template:
        with open(args.template[0], 'r', encoding='utf-8') as file:
            template = file.read()
    print(ns.render(args.note[0], template))
    return 0


def _clear(args, ns: Notesync) -> int:
    if not ns.clear():
        print('Failed to clear local data; see log for details', file=sys.stderr)
        return 1
    return 0


def argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.set_defaults(func=None)
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debugging information to stderr.')

    subs = parser.add_subparsers(title='Commands')

    p_projects = subs.add_parser('projects', help='List local projects.')
    p_projects.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_projects.set_defaults(func=_projects)

    p_push = subs.add_parser(
        'push',
        help='Push a project and its notes to the remote repository. A note that fails to push (for example, because '
             'it was changed remotely in the meantime) does not stop the others; failures are listed and the exit '
             'status is nonzero.')
    p_push.add_argument('project', nargs=1, help='Name or id of the project.')
    p_push.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_push.set_defaults(func=_push)

    p_pull = subs.add_parser(
        'pull',
        help='Pull projects from the remote repository into local data. Pulled projects replace local projects '
             'with the same id.')
    p_pull.add_argument('name', nargs='?', help='Project name. If omitted, all projects are pulled.')
    p_pull.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_pull.set_defaults(func=_pull)

    p_sync = subs.add_parser('sync', help='Push every local project, then pull every remote project.')
    p_sync.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_sync.set_defaults(func=_sync)

    p_export = subs.add_parser('export', help='Write all local data as a JSON document.')
    p_export.add_argument('file', nargs='?', help='File to write. If omitted, the document is printed.')
    p_export.set_defaults(func=_export)

    p_import = subs.add_parser(
        'import',
        help='Replace all local data with the contents of a document written by the export command. The current '
             'data is backed up first.')
    p_import.add_argument('file', nargs=1)
    p_import.set_defaults(func=_import)

    p_backups = subs.add_parser('backups', help='List backups of local data, newest first.')
    p_backups.add_argument('-j', '--json', action='store_true', help='Output as JSON.')
    p_backups.set_defaults(func=_backups)

    p_restore = subs.add_parser('restore', help='Replace local data with a backup.')
    p_restore.add_argument('key', nargs=1, help='Backup key, as shown by the backups command.')
    p_restore.set_defaults(func=_restore)

    p_render = subs.add_parser(
        'render',
        help='Print a note filled into a template, e.g. for pasting into a work-item tracker. Templates may use the '
             'placeholders ${title}, ${content}, ${project}, ${created}, ${updated}, ${characters}, ${lines}, '
             '${date} and ${time}.')
    p_render.add_argument('note', nargs=1, help='Id of the note.')
    p_render.add_argument('-t', '--template', nargs=1,
                          help='Path of the template file. Defaults to the template in your config file.')
    p_render.set_defaults(func=_render)

    p_clear = subs.add_parser('clear', help='Delete all local data. Backups are kept.')
    p_clear.set_defaults(func=_clear)

    return parser


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    if not args.func:
        parser.print_help()
        return 1
    with Notesync.for_user() as ns:
        try:
            return args.func(args, ns)
        except Error as e:
            print(f'Error: {e}', file=sys.stderr)
            return 2
