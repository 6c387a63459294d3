from argparse import Namespace
from io import StringIO

import pytest
from methwin.core.strand import Strand
from methwin.containers.gene import Gene
from methwin.containers.genome import GeneIndex
from methwin.utils import ExtractionConfig, ConfigError, ProgressBar


class TestExtractionConfig:
    def test_defaults(self):
        config = ExtractionConfig()
        assert config.window_size == 5
        assert config.cutoff == 2048
        assert not config.absolute
        assert not config.invert

    def test_step_defaults_to_window_size(self):
        assert ExtractionConfig(window_size=7).step == 7
        assert ExtractionConfig(window_size=7, window_step=3).step == 3

    def test_from_obj(self):
        args = Namespace(window_size=10, window_step=0, absolute=True, cutoff=500, invert=False, threads=None,
                         output_dir='out', methylome='in')
        config = ExtractionConfig.from_obj(args)
        assert config == ExtractionConfig(window_size=10, absolute=True, cutoff=500)

    def test_frozen(self):
        with pytest.raises(AttributeError):
            ExtractionConfig().cutoff = 10

    @pytest.mark.parametrize('kwargs', [{'window_size': 0}, {'window_step': -1}, {'cutoff': -5}, {'threads': 0}])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigError):
            ExtractionConfig(**kwargs)

    def test_max_gene_length(self):
        genome = GeneIndex([Gene(1, 0, 4096, Strand.SENSE), Gene(1, 5000, 5010, Strand.SENSE)])
        assert ExtractionConfig().max_gene_length(genome) == 100
        assert ExtractionConfig(absolute=True).max_gene_length(genome) == 4096
        assert ExtractionConfig(absolute=True).max_gene_length(GeneIndex([Gene(1, 0, 10, Strand.SENSE)])) == 100


class TestProgressBar:
    def test_update(self):
        out = StringIO()
        with ProgressBar(total=4, desc='Extracting', unit='files', file=out, cols=60) as bar:
            for _ in range(4): bar.update()
        assert bar.n == 4
        assert '100%' in out.getvalue()
        assert '4/4 files' in out.getvalue()
        assert out.getvalue().endswith('\n')
