import gzip

import pytest
from methwin.cli import main, parse_args
from methwin.io import METHYLOME_HEADER

HEADER = '\t'.join(METHYLOME_HEADER)
RECORDS = ['1\t150\t+\tCG\t2\t8\t0.9999\tM\t0.25', '1\t180\t-\tCG\t0\t8\t0.9999\tU\t0.0025']


@pytest.fixture
def inputs(tmp_path):
    genome = tmp_path / 'genes.tsv.gz'
    genome.write_bytes(gzip.compress(b'chr1\t100\t200\t+\tAT1G01010\n1\t150\t250\t-\tAT1G01020\n'))
    methylomes = tmp_path / 'methylomes'
    methylomes.mkdir()
    for name in ('a.tsv', 'b.tsv'): (methylomes / name).write_text('\n'.join([HEADER] + RECORDS) + '\n')
    return genome, methylomes, tmp_path / 'out'


class TestParseArgs:
    def test_defaults(self):
        args = parse_args(['-m', 'in', '-g', 'genes.tsv', '-o', 'out'])
        assert (args.window_size, args.window_step, args.cutoff) == (5, 0, 2048)
        assert not args.absolute and not args.invert
        assert args.threads is None

    def test_flags(self):
        args = parse_args(['-m', 'in', '-g', 'genes.tsv', '-o', 'out', '-w', '512', '-s', '256', '-a', '-c', '1024',
                           '-i', '-t', '2'])
        assert (args.window_size, args.window_step, args.cutoff, args.threads) == (512, 256, 1024, 2)
        assert args.absolute and args.invert

    def test_missing_required(self):
        with pytest.raises(SystemExit):
            parse_args(['-m', 'in'])


class TestMain:
    def test_run(self, inputs, capsys):
        genome, methylomes, out = inputs
        assert main(['-m', str(methylomes), '-g', str(genome), '-o', str(out), '-w', '10', '-c', '100']) == 0
        err = capsys.readouterr().err
        assert 'Average gene length: 100 bp, 2 genes' in err
        assert 'Done in' in err
        assert (out / 'gene' / '50' / 'a.tsv').read_text() == f'{HEADER}\n{RECORDS[0]}\n'
        # 180 is 70% into the antisense gene, read from its end at 250
        assert (out / 'gene' / '70' / 'b.tsv').read_text() == f'{HEADER}\n{RECORDS[1]}\n'
        assert (out / 'b.tsv_distribution.txt').exists()

    def test_absolute(self, inputs, capsys):
        genome, methylomes, out = inputs
        assert main(['-m', str(methylomes / 'a.tsv'), '-g', str(genome), '-o', str(out), '-a', '-w', '50',
                     '-c', '100', '-t', '1']) == 0
        assert 'The maximum gene length is 100 bp' in capsys.readouterr().err
        # Both sites share the second window of the longest gene
        assert (out / 'gene' / '50' / 'a.tsv').read_text() == f'{HEADER}\n{RECORDS[0]}\n{RECORDS[1]}\n'
        assert not (out / 'gene' / '50' / 'b.tsv').exists()

    def test_invalid_config(self, inputs, capsys):
        genome, methylomes, out = inputs
        with pytest.raises(SystemExit) as exc:
            main(['-m', str(methylomes), '-g', str(genome), '-o', str(out), '-w', '0'])
        assert exc.value.code == 2
        err = capsys.readouterr().err
        assert 'Window size must be positive' in err
        assert 'Traceback' not in err
        assert not out.exists()
