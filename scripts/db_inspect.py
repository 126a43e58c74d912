import os, sqlite3, sys

DBS = [
    os.path.join(os.getcwd(), 'callpipe.db'),
    os.path.join(os.getcwd(), 'instance', 'callpipe.db'),
]

def inspect(db):
    print(f"\n=== {db} ===")
    if not os.path.exists(db):
        print("missing")
        return
    conn = sqlite3.connect(db)
    cur = conn.cursor()
    def q(sql, params=()):
        cur.execute(sql, params)
        return cur.fetchall()
    try:
        print('watermark:', q('select max(timestamp) from records where timestamp is not null'))
        print('not transcribed:', q('select id,file,transcribed from records where transcribed is null or transcribed = 0 order by id'))
        print('pending analysis:', q("select id,caller_id from records where transcription != '' and success_sell is null order by id"))
        print('outcomes:', q('select success_sell,count(*) from records group by success_sell'))
        # records whose stored path no longer exists on disk
        missing = [r for r in q('select id,file from records order by id') if not os.path.exists(r[1])]
        print('missing files:', missing)
        print('devices without project:', q('select id,imei from caller_devices where project_id is null and deleted = 0'))
    except Exception as e:
        print('error:', e)
    finally:
        conn.close()

if __name__ == '__main__':
    targets = sys.argv[1:] or DBS
    for db in targets:
        inspect(db)
    print('\nDone.')
