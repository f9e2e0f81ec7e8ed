from bootstrap.__main__ import build_parser, cli


def test_parser_defaults():
    args = build_parser().parse_args(['a.yaml', 'b.yaml'])
    assert [str(p) for p in args.manifests] == ['a.yaml', 'b.yaml']
    assert args.timeout_ms is None
    assert not args.sequential
    assert args.log_level == 'INFO'


def test_cli_loads_and_activates(tmp_path, capsys):
    manifest = tmp_path / 'manifest.yaml'
    manifest.write_text("""
core:
  services:
    Bus: core.pubsub:PubSub
  modules:
    Json: json
""", encoding='utf-8')

    code = cli([str(manifest), '--sequential', '--timeout-ms', '5000', '--log-level', 'WARNING'])

    out = capsys.readouterr().out
    assert code == 0
    assert 'Application activated' in out
    assert 'Bus' in out and 'Json' in out


def test_cli_reports_load_failure(tmp_path, capsys):
    manifest = tmp_path / 'manifest.yaml'
    manifest.write_text('plugins:\n  Ghost: no_such_package_xyz:Ghost\n', encoding='utf-8')

    code = cli([str(manifest), '--log-level', 'ERROR'])

    assert code == 1
    assert 'failed sections: plugins' in capsys.readouterr().out


def test_cli_missing_manifest(tmp_path, capsys):
    assert cli([str(tmp_path / 'nope.yaml')]) == 1
    assert 'manifest file not found' in capsys.readouterr().out
