import pytest
from methwin.core.strand import Strand
from methwin.containers.gene import Gene
from methwin.containers.site import MethylationSite, SiteParseError

LINE = '1\t23151\t+\tCG\t0\t8\t0.9999\tU\t0.0025'
GENE = Gene(1, 50, 100, Strand.SENSE)


class TestFromLine:
    def test_valid_line(self):
        site = MethylationSite.from_line(LINE)
        assert site.chromosome == 1
        assert site.location == 23151
        assert site.strand is Strand.SENSE
        assert site.original == LINE

    def test_antisense(self):
        site = MethylationSite.from_line(LINE.replace('\t+\t', '\t-\t'))
        assert site.strand is Strand.ANTISENSE

    def test_invert(self):
        assert MethylationSite.from_line(LINE, invert=True).strand is Strand.ANTISENSE
        assert MethylationSite.from_line(LINE.replace('\t+\t', '\t-\t'), invert=True).strand is Strand.SENSE

    def test_line_terminator_is_stripped(self):
        assert MethylationSite.from_line(LINE + '\r\n').original == LINE

    def test_too_few_fields(self):
        with pytest.raises(SiteParseError, match="9 fields"):
            MethylationSite.from_line('1\t23151\t+\tCG\t0\t8\t0.9999\t')

    def test_too_many_fields(self):
        with pytest.raises(SiteParseError, match="9 fields"):
            MethylationSite.from_line(LINE + '\textra')

    def test_other_context(self):
        with pytest.raises(SiteParseError, match="CG"):
            MethylationSite.from_line(LINE.replace('\tCG\t', '\tCHG\t'))

    def test_header_line(self):
        header = 'seqnames\tstart\tstrand\tcontext\tcounts.methylated\tcounts.total\tposteriorMax\tstatus\trc.meth.lvl'
        with pytest.raises(SiteParseError):
            MethylationSite.from_line(header)

    @pytest.mark.parametrize('chromosome', ['X', 'chr1', '-1', '256', ''])
    def test_invalid_chromosome(self, chromosome):
        with pytest.raises(SiteParseError, match="chromosome"):
            MethylationSite.from_line(chromosome + LINE[1:])

    @pytest.mark.parametrize('location', ['12a', '', '-', '1.5'])
    def test_invalid_location(self, location):
        with pytest.raises(SiteParseError, match="location"):
            MethylationSite.from_line(LINE.replace('23151', location))

    def test_signed_location(self):
        assert MethylationSite.from_line(LINE.replace('23151', '-12')).location == -12

    @pytest.mark.parametrize('location', ['99999999999', '2147483648', '-2147483649'])
    def test_location_out_of_range(self, location):
        with pytest.raises(SiteParseError, match="out of range"):
            MethylationSite.from_line(LINE.replace('23151', location))

    def test_location_limits(self):
        assert MethylationSite.from_line(LINE.replace('23151', '2147483647')).location == 2 ** 31 - 1
        assert MethylationSite.from_line(LINE.replace('23151', '-2147483648')).location == -2 ** 31

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            MethylationSite.from_line('')


class TestIsInGene:
    def test_within(self):
        assert MethylationSite(1, 80, Strand.SENSE).is_in_gene(GENE, 0)

    def test_on_boundaries(self):
        assert MethylationSite(1, 50, Strand.SENSE).is_in_gene(GENE, 0)
        assert MethylationSite(1, 100, Strand.SENSE).is_in_gene(GENE, 0)

    def test_above(self):
        site = MethylationSite(1, 150, Strand.SENSE)
        assert not site.is_in_gene(GENE, 0)
        assert not site.is_in_gene(GENE, 49)
        assert site.is_in_gene(GENE, 50)

    def test_below(self):
        site = MethylationSite(1, 0, Strand.SENSE)
        assert not site.is_in_gene(GENE, 0)
        assert not site.is_in_gene(GENE, 49)
        assert site.is_in_gene(GENE, 50)

    def test_opposite_strand(self):
        assert not MethylationSite(1, 80, Strand.ANTISENSE).is_in_gene(GENE, 0)
        assert MethylationSite(1, 80, Strand.ANTISENSE).is_in_gene(Gene(1, 50, 100, Strand.ANTISENSE), 0)

    def test_other_chromosome(self):
        assert not MethylationSite(2, 80, Strand.SENSE).is_in_gene(GENE, 1000)
