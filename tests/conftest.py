import pytest

WARFARIN_ROWS = """ID,TIME,WEIGHT,AGE,SEX,AMOUNT,DVID,DV
1,0,70,30,1,100,.,.
1,0,70,30,1,.,2,100
1,1,70,30,1,.,1,9.0
1,2,70,30,1,.,1,12.0
1,24,70,30,1,.,1,8.0
1,24,70,30,1,.,2,40
1,48,70,30,1,.,1,4.0
1,72,70,30,1,.,1,2.0
1,96,70,30,1,.,1,0.5
2,0,140,40,0,150,.,.
2,1,140,40,0,.,1,5.0
2,1,140,40,0,.,1,5.5
2,12,140,40,0,.,1,6.0
2,24,140,40,0,.,1,4.0
2,48,140,40,0,.,1,2.0
3#,0,60,50,1,100,.,.
3#,2,60,50,1,.,1,7.0
"""


@pytest.fixture
def warfarin_csv(tmp_path):
    path = tmp_path / "warfarin.csv"
    path.write_text(WARFARIN_ROWS)
    return path
